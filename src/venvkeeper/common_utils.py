from __future__ import annotations  # Python 3.6+ compatibility

import sys
import unicodedata

# Keep a reference to the original, built-in print function
_builtin_print = print


def safe_print(*args, **kwargs):
    """
    Encoding-safe print: never lets a UnicodeEncodeError escape to the caller.
    Detects non-UTF8 sessions (like cp1252) and strips emojis to prevent mojibake.
    """
    if "flush" not in kwargs:
        kwargs["flush"] = True
    try:
        _builtin_print(*args, **kwargs)
    except UnicodeEncodeError:
        stream = kwargs.get("file") or sys.stdout
        encoding = getattr(stream, "encoding", None) or "utf-8"
        safe_args = []
        for arg in args:
            if isinstance(arg, str):
                # If shell is not UTF-8, strip problematic symbols
                if encoding.lower() not in ("utf-8", "utf8"):
                    arg = "".join(
                        (c if ord(c) < 128 or unicodedata.category(c)[0] != "S" else "?")
                        for c in arg
                    )
                safe_args.append(arg.encode(encoding, "replace").decode(encoding))
            else:
                safe_args.append(arg)
        _builtin_print(*safe_args, **kwargs)


def print_header(title):
    """Prints a consistent, pretty header."""
    from venvkeeper.i18n import _

    safe_print("\n" + "=" * 60)
    safe_print(_("  🚀 {}").format(title))
    safe_print("=" * 60)

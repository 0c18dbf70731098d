"""
Package lifecycle tests against a simulated interpreter.

FakeInterpreter stands in for the CommandRunner: it answers the import probe
from an in-memory package table and applies ``pip install`` / ``pip uninstall``
to that table, so the assert/install/uninstall state machine can be exercised
without a network or a real venv.
"""
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from venvkeeper.config import DEFAULT_INDEX_URL, ConfigManager, Settings
from venvkeeper.errors import (
    CommandFailedError,
    PackageAssertionError,
    PackageNotFoundError,
    PackageStillInstalledError,
    PipCommandError,
    PipUnavailableError,
    SearchPathError,
    VersionMismatchError,
)
from venvkeeper.execution import ExecutionOutcome
from venvkeeper.packages import IMPORT_PROBE, PackageManager, PackageState

PYTHON = "/venv/bin/python3"


class FakeInterpreter:
    def __init__(self, installed=None, pip_available=True):
        self.installed = dict(installed or {})
        self.pip_available = pip_available
        self.forced_version = None  # version pip "installs" regardless of the pin
        self.calls = []
        self.install_is_noop = False
        self.uninstall_is_noop = False
        self.pip_exit_code = 0

    # CommandRunner.output
    def output(self, python, *args):
        assert python == PYTHON
        if args[:2] == ("-c", IMPORT_PROBE):
            name = args[2]
            if name in self.installed:
                return ExecutionOutcome(0, stdout=self.installed[name] + "\n")
            err = f"ModuleNotFoundError: No module named '{name}'"
            return ExecutionOutcome(1, stderr=err, error=CommandFailedError("probe", 1, err))
        raise AssertionError(f"unexpected output() call {args}")

    # CommandRunner.succeeds
    def succeeds(self, python, *args):
        self.calls.append(args)
        if args == ("-m", "pip", "--version"):
            return self.pip_available
        raise AssertionError(f"unexpected succeeds() call {args}")

    # CommandRunner.run
    def run(self, python, *args):
        self.calls.append(args)
        if self.pip_exit_code:
            raise CommandFailedError(" ".join(args), self.pip_exit_code)
        if args[:3] == ("-m", "pip", "install"):
            if not self.install_is_noop:
                name, _, version = args[3].partition("==")
                self.installed[name] = self.forced_version or version or "1.0.0"
        elif args[:3] == ("-m", "pip", "uninstall"):
            if not self.uninstall_is_noop:
                self.installed.pop(args[3], None)
        elif args[:3] == ("-m", "pip", "list"):
            pass
        else:
            raise AssertionError(f"unexpected run() call {args}")

    def pip_calls(self, verb):
        return [c for c in self.calls if c[:3] == ("-m", "pip", verb)]


class PackageTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        env = mock.patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("PYPI_INDEX_URL", None)
        self.settings = Settings(ConfigManager(Path(self._tmp.name) / "config.json"))

    def manager(self, fake):
        return PackageManager(fake, self.settings)


class TestAssert(PackageTestCase):
    def test_absent_package(self):
        manager = self.manager(FakeInterpreter())
        with self.assertRaises(PackageNotFoundError) as ctx:
            manager.assert_package(PYTHON, "funppy")
        self.assertIn("not found", str(ctx.exception))

    def test_present_without_version(self):
        status = self.manager(FakeInterpreter({"funppy": "0.5.0"})).assert_package(PYTHON, "funppy")
        self.assertIs(status.state, PackageState.PRESENT_UNCHECKED)
        self.assertEqual(status.installed_version, "0.5.0")

    def test_version_mismatch(self):
        manager = self.manager(FakeInterpreter({"funppy": "0.4.0"}))
        with self.assertRaises(VersionMismatchError) as ctx:
            manager.assert_package(PYTHON, "funppy", "0.5.0")
        self.assertIn("upgrade to 0.5.0", str(ctx.exception))
        self.assertIsInstance(ctx.exception, PackageAssertionError)

    def test_leading_v_ignored_both_ways(self):
        manager = self.manager(FakeInterpreter({"tagged": "v1.2.0", "plain": "1.2.0"}))
        self.assertIs(manager.assert_package(PYTHON, "tagged", "1.2.0").state, PackageState.PRESENT)
        self.assertIs(manager.assert_package(PYTHON, "plain", "v1.2.0").state, PackageState.PRESENT)

    def test_probe_distinguishes_states(self):
        manager = self.manager(FakeInterpreter({"funppy": "0.4.0"}))
        self.assertIs(manager.probe(PYTHON, "missing").state, PackageState.ABSENT)
        self.assertIs(manager.probe(PYTHON, "funppy", "0.5.0").state, PackageState.VERSION_MISMATCH)
        self.assertIs(manager.probe(PYTHON, "funppy", "0.4.0").state, PackageState.PRESENT)
        self.assertIs(manager.probe(PYTHON, "funppy").state, PackageState.PRESENT_UNCHECKED)


class TestInstall(PackageTestCase):
    def test_install_twice_runs_pip_once(self):
        fake = FakeInterpreter()
        manager = self.manager(fake)
        manager.install(PYTHON, "funppy==0.5.0")
        manager.install(PYTHON, "funppy==0.5.0")
        self.assertEqual(len(fake.pip_calls("install")), 1)

    def test_already_satisfied_skips_pip_entirely(self):
        fake = FakeInterpreter({"funppy": "0.5.0"})
        status = self.manager(fake).install(PYTHON, "funppy==0.5.0")
        self.assertIs(status.state, PackageState.PRESENT)
        self.assertEqual(fake.calls, [])

    def test_install_then_assert_round_trip(self):
        manager = self.manager(FakeInterpreter())
        manager.install(PYTHON, "pkgA==1.0.0")
        self.assertIs(manager.assert_package(PYTHON, "pkgA", "1.0.0").state, PackageState.PRESENT)

    def test_pip_command_line(self):
        fake = FakeInterpreter()
        self.manager(fake).install(PYTHON, "funppy==0.5.0")
        self.assertEqual(
            fake.pip_calls("install")[0],
            (
                "-m",
                "pip",
                "install",
                "funppy==0.5.0",
                "--upgrade",
                "--index-url",
                DEFAULT_INDEX_URL,
                "--quiet",
                "--disable-pip-version-check",
            ),
        )

    def test_index_url_override_read_at_install_time(self):
        fake = FakeInterpreter()
        manager = self.manager(fake)
        os.environ["PYPI_INDEX_URL"] = "https://mirror.example/simple"
        manager.install(PYTHON, "funppy")
        self.assertIn("https://mirror.example/simple", fake.pip_calls("install")[0])

    def test_version_mismatch_triggers_upgrade(self):
        fake = FakeInterpreter({"funppy": "0.4.0"})
        self.manager(fake).install(PYTHON, "funppy==0.5.0")
        self.assertEqual(fake.installed["funppy"], "0.5.0")

    def test_pip_unavailable(self):
        fake = FakeInterpreter(pip_available=False)
        with self.assertRaises(PipUnavailableError):
            self.manager(fake).install(PYTHON, "funppy")
        self.assertEqual(fake.pip_calls("install"), [])

    def test_pip_failure(self):
        fake = FakeInterpreter()
        fake.pip_exit_code = 1
        with self.assertRaises(PipCommandError) as ctx:
            self.manager(fake).install(PYTHON, "funppy")
        self.assertIn("pip install package failed", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, CommandFailedError)

    def test_successful_pip_but_unimportable_is_failure(self):
        fake = FakeInterpreter()
        fake.install_is_noop = True
        with self.assertRaises(PackageNotFoundError):
            self.manager(fake).install(PYTHON, "funppy==0.5.0")
        self.assertEqual(len(fake.pip_calls("install")), 1)

    def test_installed_wrong_version_is_failure(self):
        fake = FakeInterpreter()
        fake.forced_version = "0.6.0"
        with self.assertRaises(VersionMismatchError):
            self.manager(fake).install(PYTHON, "funppy==0.5.0")


class TestUninstall(PackageTestCase):
    def test_absent_package_is_noop(self):
        fake = FakeInterpreter()
        self.manager(fake).uninstall(PYTHON, "funppy")
        self.assertEqual(fake.calls, [])

    def test_uninstall_then_assert_not_found(self):
        fake = FakeInterpreter({"pkgA": "1.0.0"})
        manager = self.manager(fake)
        manager.uninstall(PYTHON, "pkgA")
        with self.assertRaises(PackageNotFoundError):
            manager.assert_package(PYTHON, "pkgA")

    def test_version_suffix_ignored(self):
        fake = FakeInterpreter({"funppy": "0.4.0"})
        self.manager(fake).uninstall(PYTHON, "funppy==9.9.9")
        self.assertEqual(
            fake.pip_calls("uninstall"),
            [("-m", "pip", "uninstall", "funppy", "-y", "--quiet", "--disable-pip-version-check")],
        )
        self.assertNotIn("funppy", fake.installed)

    def test_empty_version_suffix_ignored(self):
        fake = FakeInterpreter({"funppy": "0.4.0"})
        self.manager(fake).uninstall(PYTHON, "funppy==")
        self.assertEqual(fake.pip_calls("uninstall")[0][3], "funppy")
        self.assertNotIn("funppy", fake.installed)

    def test_pip_unavailable(self):
        fake = FakeInterpreter({"funppy": "0.4.0"}, pip_available=False)
        with self.assertRaises(PipUnavailableError):
            self.manager(fake).uninstall(PYTHON, "funppy")
        self.assertEqual(fake.pip_calls("uninstall"), [])

    def test_pip_failure(self):
        fake = FakeInterpreter({"funppy": "0.4.0"})
        fake.pip_exit_code = 2
        with self.assertRaises(PipCommandError) as ctx:
            self.manager(fake).uninstall(PYTHON, "funppy")
        self.assertEqual(ctx.exception.exit_code, 2)

    def test_still_present_after_uninstall(self):
        fake = FakeInterpreter({"funppy": "0.4.0"})
        fake.uninstall_is_noop = True
        with self.assertRaises(PackageStillInstalledError):
            self.manager(fake).uninstall(PYTHON, "funppy")


class TestListPackages(PackageTestCase):
    def test_success(self):
        fake = FakeInterpreter()
        self.assertTrue(self.manager(fake).list_packages(PYTHON))
        self.assertEqual(fake.pip_calls("list"), [("-m", "pip", "list")])

    def test_errors_are_logged_not_raised(self):
        fake = FakeInterpreter()
        fake.pip_exit_code = 1
        with self.assertLogs("venvkeeper.packages", level="ERROR") as logs:
            self.assertFalse(self.manager(fake).list_packages(PYTHON))
        self.assertIn("failed to list python packages", logs.output[0])

    def test_search_path_errors_are_logged_too(self):
        fake = FakeInterpreter()
        with mock.patch.object(fake, "run", side_effect=SearchPathError("nope")):
            with self.assertLogs("venvkeeper.packages", level="ERROR"):
                self.assertFalse(self.manager(fake).list_packages(PYTHON))


if __name__ == "__main__":
    unittest.main()

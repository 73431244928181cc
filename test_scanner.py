import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rias import scanner
from rias.core import AccessError, RootNotFoundError, ScanOptions


def touch(path: Path, data: bytes = b"x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


class TestScan(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def scan(self, depth=1, parents=False, on_error=None):
        options = ScanOptions(root=self.root, max_depth=depth, include_parent_folders=parents)
        return scanner.scan(options, on_error=on_error)

    def test_depth_one_scenario(self):
        """A is a leaf; B only holds a subfolder that lies past depth 1."""
        touch(self.root / "A" / "img1.png")
        touch(self.root / "A" / "img2.png")
        touch(self.root / "B" / "sub" / "img3.jpg")

        self.assertEqual(self.scan(depth=1), [self.root / "A"])

    def test_deeper_bound_reaches_nested_leaf(self):
        touch(self.root / "A" / "img1.png")
        touch(self.root / "B" / "sub" / "img3.jpg")

        self.assertEqual(set(self.scan(depth=2)), {self.root / "A", self.root / "B" / "sub"})

    def test_depth_zero_only_considers_root(self):
        touch(self.root / "img.png")
        self.assertEqual(self.scan(depth=0), [self.root])

        touch(self.root / "A" / "img.png")
        self.assertEqual(self.scan(depth=0), [])

    def test_never_returns_folder_beyond_depth(self):
        current = self.root
        for i in range(6):
            current = current / f"level{i}"
            touch(current / "img.png")

        for depth in range(7):
            found = self.scan(depth=depth, parents=True)
            for folder in found:
                level = len(folder.relative_to(self.root).parts)
                self.assertLessEqual(level, depth)

    def test_leaf_with_files_always_eligible(self):
        touch(self.root / "leaf" / "a.txt")
        for parents in (False, True):
            self.assertIn(self.root / "leaf", self.scan(parents=parents))

    def test_parent_with_files_needs_flag(self):
        touch(self.root / "parent" / "cover.png")
        touch(self.root / "parent" / "child" / "img.png")

        self.assertNotIn(self.root / "parent", self.scan(depth=2))
        found = self.scan(depth=2, parents=True)
        self.assertIn(self.root / "parent", found)
        self.assertIn(self.root / "parent" / "child", found)

    def test_empty_folders_are_not_eligible(self):
        (self.root / "empty").mkdir()
        (self.root / "nested" / "empty").mkdir(parents=True)
        self.assertEqual(self.scan(depth=3, parents=True), [])

    def test_unreadable_folder_is_skipped(self):
        touch(self.root / "locked" / "img.png")
        touch(self.root / "open" / "img.png")
        real_scandir = os.scandir
        locked = str(self.root / "locked")

        def fake_scandir(path):
            if str(path) == locked:
                raise PermissionError(13, "Permission denied", locked)
            return real_scandir(path)

        errors = []
        with mock.patch.object(scanner.os, "scandir", side_effect=fake_scandir):
            found = self.scan(on_error=errors.append)

        self.assertEqual(found, [self.root / "open"])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], AccessError)

    def test_missing_root_fails_before_work(self):
        options = ScanOptions(root=self.root / "nope")
        with self.assertRaises(RootNotFoundError):
            scanner.scan(options)

    def test_negative_depth_rejected(self):
        with self.assertRaises(ValueError):
            ScanOptions(root=self.root, max_depth=-1)


class TestListFolder(unittest.TestCase):
    def test_files_sorted_by_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ("c.png", "a.png", "b.jpg"):
                touch(root / name)
            (root / "sub").mkdir()

            subdirs, files = scanner.list_folder(root)

            self.assertEqual(subdirs, [root / "sub"])
            self.assertEqual([f.name for f in files], ["a.png", "b.jpg", "c.png"])
            self.assertTrue(all(f.mtime_ns > 0 for f in files))

    def test_missing_folder_raises_access_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(AccessError):
                scanner.list_folder(Path(tmp) / "missing")


if __name__ == "__main__":
    unittest.main()

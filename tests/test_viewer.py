import os
import tempfile
import unittest

# The viewer tests need a QApplication but no screen
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt5.QtGui import QImage
    from PyQt5.QtWidgets import QApplication
    from bmpread import viewer
except ImportError:
    viewer = None

from bmpread import DecodedImage, Flags
from tests.bmp_fixtures import make_bmp


@unittest.skipIf(viewer is None, "PyQt5 is not available")
class TestToQImage(unittest.TestCase):

    def test_to_qimage_rgb(self):
        image = DecodedImage(2, 1, Flags.NONE, bytearray([0xff, 0, 0, 0, 0, 0xff]))
        qimage = viewer.to_qimage(image)
        self.assertEqual(2, qimage.width())
        self.assertEqual(1, qimage.height())
        self.assertEqual(QImage.Format_RGB888, qimage.format())
        self.assertEqual(0xffff0000, qimage.pixel(0, 0))
        self.assertEqual(0xff0000ff, qimage.pixel(1, 0))

    def test_to_qimage_rgba(self):
        image = DecodedImage(1, 1, Flags.ALPHA, bytearray([0x30, 0x20, 0x10, 0x80]))
        qimage = viewer.to_qimage(image)
        self.assertEqual(QImage.Format_RGBA8888, qimage.format())
        self.assertEqual(0x80302010, qimage.pixel(0, 0))

    def test_qimage_outlives_release(self):
        image = DecodedImage(1, 1, Flags.NONE, bytearray([1, 2, 3]))
        qimage = viewer.to_qimage(image)
        image.data = None
        self.assertEqual(0xff010203, qimage.pixel(0, 0))

    def test_parse_args(self):
        args = viewer.parse_args(["--alpha", "--any-size", "image.bmp"])
        self.assertTrue(args.alpha)
        self.assertTrue(args.any_size)
        self.assertFalse(args.verbose)
        self.assertEqual("image.bmp", args.bmpfile)

        args = viewer.parse_args([])
        self.assertFalse(args.alpha)
        self.assertIsNone(args.bmpfile)


@unittest.skipIf(viewer is None, "PyQt5 is not available")
class TestBMPViewer(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write_bmp(self, name, data):
        path = os.path.join(self.tmp.name, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def test_checkboxes_follow_flags(self):
        session = viewer.BMPViewer(Flags.ANY_SIZE)
        self.assertFalse(session.alpha_button.isChecked())
        self.assertTrue(session.any_size_button.isChecked())
        self.assertEqual(Flags.ANY_SIZE, session.flags())

        session.alpha_button.setChecked(True)
        self.assertEqual(Flags.ALPHA | Flags.ANY_SIZE, session.flags())
        session.any_size_button.setChecked(False)
        self.assertEqual(Flags.ALPHA, session.flags())

    def test_loading_releases_previous_image(self):
        first = self.write_bmp("first.bmp", make_bmp(2, 2, 24, [bytes(6), bytes(6)]))
        second = self.write_bmp("second.bmp", make_bmp(4, 1, 24, [bytes(12)]))
        session = viewer.BMPViewer()

        self.assertTrue(session.load(first))
        first_image = session.image
        self.assertEqual(2, session.qimage.width())

        self.assertTrue(session.load(second))
        self.assertIsNone(first_image.data)
        self.assertIsNot(first_image, session.image)
        self.assertEqual(4, session.qimage.width())
        self.assertIn("width: 4", session.metadata_box.toPlainText())

    def test_any_size_checkbox_is_used_when_loading(self):
        path = self.write_bmp("odd.bmp", make_bmp(3, 1, 24, [bytes(9)]))
        session = viewer.BMPViewer()

        self.assertFalse(session.load(path))
        self.assertIsNone(session.image)
        self.assertIn("Failed to load", session.metadata_box.toPlainText())

        session.any_size_button.setChecked(True)
        self.assertTrue(session.load(path))
        self.assertEqual(3, session.image.width)

    def test_failed_load_keeps_current_image(self):
        good = self.write_bmp("good.bmp", make_bmp(2, 2, 24, [bytes(6), bytes(6)]))
        bad = self.write_bmp("bad.bmp", b"not a bitmap at all")
        session = viewer.BMPViewer()

        session.load(good)
        current = session.image
        self.assertFalse(session.load(bad))
        self.assertIs(current, session.image)
        self.assertIsNotNone(current.data)

# NOTE: For displaying the decoded image in a GUI,
#       please download PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import argparse
import logging
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QSlider, QHBoxLayout, QCheckBox
)
from PyQt5.QtGui import QPixmap, QImage
from PyQt5.QtCore import Qt

from bmpread.bmp_parser import Flags, decode, release
from bmpread.errors import BMPError

logger = logging.getLogger(__name__)


def to_qimage(image):
    """Copy a DecodedImage into a QImage that owns its pixels."""
    fmt = QImage.Format_RGBA8888 if image.has_alpha else QImage.Format_RGB888
    bytes_per_line = image.width * image.channels
    qimage = QImage(bytes(image.data), image.width, image.height, bytes_per_line, fmt)
    return qimage.copy()


class BMPViewer(QWidget):
    def __init__(self, flags=Flags.NONE):
        super().__init__()
        self.setWindowTitle("BMP Viewer")
        self.resize(700, 500)

        # Everything about the currently shown image lives here
        self.image = None
        self.qimage = None
        self.scale = 1.0

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Button to open BMP file
        self.open_button = QPushButton("Open BMP File")
        self.open_button.setFixedSize(150, 50)
        self.open_button.clicked.connect(self.open_file)
        top_layout.addWidget(self.open_button)

        top_layout.addStretch()

        # Checkboxes for the decode flags
        self.alpha_button = QCheckBox("Alpha")
        self.any_size_button = QCheckBox("Any size")
        self.alpha_button.setChecked(bool(flags & Flags.ALPHA))
        self.any_size_button.setChecked(bool(flags & Flags.ANY_SIZE))
        top_layout.addWidget(self.alpha_button)
        top_layout.addWidget(self.any_size_button)

        layout.addLayout(top_layout)

        # Label to display the image
        self.image_label = QLabel("No Image Loaded")
        self.image_label.setStyleSheet("border: 1px solid black; background: gray;")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFixedSize(700, 400)
        layout.addWidget(self.image_label)

        # Text box to display BMP metadata
        self.metadata_box = QTextEdit("No Metadata Loaded")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        # Slider for scaling the image
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(1, 400)
        self.scale_slider.setValue(100)
        self.scale_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Scale"))
        layout.addWidget(self.scale_slider)

        self.setLayout(layout)

    def flags(self):
        flags = Flags.NONE
        if self.alpha_button.isChecked():
            flags |= Flags.ALPHA
        if self.any_size_button.isChecked():
            flags |= Flags.ANY_SIZE
        return flags

    # Ask for a BMP file and load it
    def open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Open BMP File", "", "BMP Files (*.bmp)")
        if not filepath:
            return
        self.load(filepath)

    def load(self, filepath):
        try:
            image = decode(filepath, self.flags())
        except BMPError as e:
            logger.error("Failed to load %s: %s", filepath, e)
            self.metadata_box.setText(f"Failed to load {filepath}:\n{e}")
            return False

        logger.info("Loaded %s: %r", filepath, image)

        # Display metadata
        meta_text = ""
        for k, v in image.metadata.items():
            meta_text += f"{k}: {v}\n"
        meta_text += f"alpha: {image.has_alpha}\n"
        self.metadata_box.setText(meta_text)

        # The QImage keeps its own copy, so the decoded buffer can go
        if self.image is not None:
            release(self.image)
        self.image = image
        self.qimage = to_qimage(image)
        self.setWindowTitle(f"BMP Viewer - {filepath}")

        self.update_image()
        return True

    # Update image display based on the scale slider
    def update_image(self):
        if self.qimage is None:
            return

        self.scale = self.scale_slider.value() / 100.0
        new_w = max(1, int(self.qimage.width() * self.scale))
        new_h = max(1, int(self.qimage.height() * self.scale))

        pixmap = QPixmap.fromImage(self.qimage).scaled(
            new_w, new_h, Qt.IgnoreAspectRatio, Qt.FastTransformation
        )
        self.image_label.setPixmap(pixmap)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="bmpread-view",
        description="Load a BMP file with bmpread and display it. Alpha channels "
                    "are ignored unless you pass --alpha. The image must have "
                    "power-of-two dimensions unless you pass --any-size.",
    )
    parser.add_argument("--alpha", action="store_true", help="keep the alpha channel if there is one")
    parser.add_argument("--any-size", action="store_true", help="allow non power-of-two dimensions")
    parser.add_argument("-v", "--verbose", action="store_true", help="log header details")
    parser.add_argument("bmpfile", nargs="?", help="file to open on startup")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    flags = Flags.NONE
    if args.alpha:
        flags |= Flags.ALPHA
    if args.any_size:
        flags |= Flags.ANY_SIZE

    app = QApplication(sys.argv[:1])
    viewer = BMPViewer(flags)
    if args.bmpfile and not viewer.load(args.bmpfile):
        return 1
    viewer.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())

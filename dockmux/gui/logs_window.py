"""
Container logs window
"""

from typing import Optional

from PyQt6.QtWidgets import QDialog, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QCheckBox
from PyQt6.QtCore import Qt
import logging

from ..api import Stream
from .log_viewer_widget import LogViewerWidget, FrameReaderThread

logger = logging.getLogger(__name__)


class ContainerLogsWindow(QDialog):
    """Window showing one container's output, one reader session at a time"""

    def __init__(self, client, container_id: str, follow: bool = True, tail: str = 'all',
                 tty: Optional[bool] = None, parent=None):
        super().__init__(parent)

        self.client = client
        self.container_id = container_id
        self.tail = tail
        self.tty = tty
        self.reader = None

        self.setWindowFlags(Qt.WindowType.Window)
        self.setWindowTitle(f"Logs - {container_id}")
        self.setMinimumSize(900, 600)

        self.init_ui(follow)

    def init_ui(self, follow: bool):
        """Initialize UI"""
        layout = QVBoxLayout()

        bar = QHBoxLayout()

        self.status_label = QLabel("Not connected")
        bar.addWidget(self.status_label)
        bar.addStretch()

        self.follow_check = QCheckBox("Follow")
        self.follow_check.setChecked(follow)
        bar.addWidget(self.follow_check)

        self.reconnect_btn = QPushButton("Reconnect")
        self.reconnect_btn.clicked.connect(self.reconnect)
        bar.addWidget(self.reconnect_btn)

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.close)
        bar.addWidget(close_btn)

        layout.addLayout(bar)

        self.log_viewer = LogViewerWidget(parent=self)
        layout.addWidget(self.log_viewer)

        self.setLayout(layout)

    def start_logs(self):
        """Open a logs session unless one is running"""
        if self.reader:
            return

        self.reader = FrameReaderThread(
            self.client,
            self.container_id,
            follow=self.follow_check.isChecked(),
            tail=self.tail,
            tty=self.tty
        )
        self.reader.frame_received.connect(self.log_viewer.append_frame)
        self.reader.finished_signal.connect(self._on_reader_finished)
        self.reader.start()

        self.status_label.setText("Reading...")
        logger.debug(f"Logs session opened for {self.container_id}")

    def stop_logs(self, wait_ms: int = 1000):
        """Close the running session, if any"""
        if not self.reader:
            return
        reader, self.reader = self.reader, None
        reader.finished_signal.disconnect(self._on_reader_finished)
        reader.stop()
        reader.wait(wait_ms)

    def reconnect(self):
        """Restart the session with the current follow setting"""
        self.stop_logs()
        self.log_viewer.clear()
        self.start_logs()

    def summary(self) -> str:
        counts = self.log_viewer.counts
        return (f"{counts[Stream.STDOUT] + counts[Stream.UNKNOWN]} stdout, "
                f"{counts[Stream.STDERR]} stderr")

    def _on_reader_finished(self, success: bool, message: str):
        prefix = "[OK]" if success else "[ERROR]"
        self.status_label.setText(f"{prefix} {message} ({self.summary()})")
        self.reader = None

    def closeEvent(self, event):
        self.stop_logs()
        event.accept()

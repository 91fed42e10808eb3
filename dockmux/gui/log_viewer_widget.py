"""
Frame viewer widget
Renders demultiplexed container output with ANSI SGR colors, per-stream
coloring and a stream filter
"""

from collections import deque
from typing import Deque, Dict, List, Optional

from PyQt6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QTextEdit, QCheckBox, QComboBox
from PyQt6.QtCore import QThread, pyqtSignal, Qt
from PyQt6.QtGui import QTextCharFormat, QColor, QFont, QTextCursor
import re
import logging

from ..api import DockerException, Frame, Stream

logger = logging.getLogger(__name__)

SGR_PATTERN = re.compile(r'\x1b\[([0-9;]*)m')

DEFAULT_COLOR = QColor(212, 212, 212)
DEFAULT_MAX_FRAMES = 10000

PALETTE = [
    QColor(0, 0, 0),        # black
    QColor(205, 49, 49),    # red
    QColor(13, 188, 121),   # green
    QColor(229, 229, 16),   # yellow
    QColor(36, 114, 200),   # blue
    QColor(188, 63, 188),   # magenta
    QColor(17, 168, 205),   # cyan
    QColor(229, 229, 229),  # white
]
BRIGHT_PALETTE = [
    QColor(102, 102, 102),
    QColor(241, 76, 76),
    QColor(35, 209, 139),
    QColor(245, 245, 67),
    QColor(59, 142, 234),
    QColor(214, 112, 214),
    QColor(41, 184, 219),
    QColor(255, 255, 255),
]

STREAM_COLORS = {
    Stream.STDOUT: DEFAULT_COLOR,
    Stream.STDERR: QColor(241, 76, 76),
    Stream.STDIN: QColor(102, 102, 102),
    Stream.UNKNOWN: DEFAULT_COLOR,
}

# Filter entries: label, streams shown (None shows everything)
STREAM_FILTERS = [
    ("All streams", None),
    ("stdout", {Stream.STDOUT, Stream.UNKNOWN}),
    ("stderr", {Stream.STDERR}),
]


def apply_sgr(fmt: QTextCharFormat, params: str, base_color: QColor):
    """
    Update a character format from one SGR parameter list

    Args:
        fmt: Format to modify in place
        params: Parameters between '\\x1b[' and 'm', e.g. '1;31'
        base_color: Foreground restored by reset (0) and default (39)
    """
    codes = [int(p) for p in params.split(';') if p] or [0]
    for code in codes:
        if code == 0:
            fmt.setForeground(base_color)
            fmt.setFontWeight(QFont.Weight.Normal.value)
            fmt.clearBackground()
        elif code == 1:
            fmt.setFontWeight(QFont.Weight.Bold.value)
        elif code == 22:
            fmt.setFontWeight(QFont.Weight.Normal.value)
        elif 30 <= code <= 37:
            fmt.setForeground(PALETTE[code - 30])
        elif code == 39:
            fmt.setForeground(base_color)
        elif 40 <= code <= 47:
            fmt.setBackground(PALETTE[code - 40])
        elif code == 49:
            fmt.clearBackground()
        elif 90 <= code <= 97:
            fmt.setForeground(BRIGHT_PALETTE[code - 90])
        elif 100 <= code <= 107:
            fmt.setBackground(BRIGHT_PALETTE[code - 100])


class LogViewerWidget(QWidget):
    """
    Viewer for container output frames

    Keeps the last max_frames frames so the stream filter can be changed
    after the fact; rendering is redone from that buffer.
    """

    def __init__(self, parent=None, show_controls=True, max_frames: int = DEFAULT_MAX_FRAMES):
        super().__init__(parent)
        self.auto_scroll = True
        self.show_stream = False
        self.show_controls = show_controls
        self.visible_streams: Optional[set] = None
        self.frames: Deque[Frame] = deque(maxlen=max_frames)
        self.counts: Dict[Stream, int] = {stream: 0 for stream in Stream}
        self.line_count = 0
        self.init_ui()

    def init_ui(self):
        """Initialize UI"""
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)

        if self.show_controls:
            controls_layout = QHBoxLayout()

            self.stream_combo = QComboBox()
            for label, _ in STREAM_FILTERS:
                self.stream_combo.addItem(label)
            self.stream_combo.currentIndexChanged.connect(self._on_stream_filter_changed)
            controls_layout.addWidget(self.stream_combo)

            self.show_stream_check = QCheckBox("Show stream")
            self.show_stream_check.stateChanged.connect(self._on_show_stream_changed)
            controls_layout.addWidget(self.show_stream_check)

            self.wrap_logs_check = QCheckBox("Wrap lines")
            self.wrap_logs_check.setChecked(True)
            self.wrap_logs_check.stateChanged.connect(self._on_wrap_logs_changed)
            controls_layout.addWidget(self.wrap_logs_check)

            self.auto_scroll_check = QCheckBox("Auto-scroll")
            self.auto_scroll_check.setChecked(True)
            self.auto_scroll_check.stateChanged.connect(self._on_auto_scroll_changed)
            controls_layout.addWidget(self.auto_scroll_check)

            controls_layout.addStretch()

            clear_btn = QPushButton("Clear")
            clear_btn.clicked.connect(self.clear)
            controls_layout.addWidget(clear_btn)

            layout.addLayout(controls_layout)

        self.logs_text = QTextEdit()
        self.logs_text.setReadOnly(True)
        self.logs_text.setLineWrapMode(QTextEdit.LineWrapMode.WidgetWidth)
        self.logs_text.document().setMaximumBlockCount(self.frames.maxlen or 0)

        font = QFont("Monaco, Menlo, Courier New, monospace")
        font.setPointSize(11)
        self.logs_text.setFont(font)

        self.logs_text.setStyleSheet("""
            QTextEdit {
                background-color: #1e1e1e;
                color: #d4d4d4;
                border: 1px solid #3e3e3e;
            }
        """)

        layout.addWidget(self.logs_text)
        self.setLayout(layout)

    def append_frame(self, frame: Frame):
        """Store a frame and render it if its stream is shown"""
        self.frames.append(frame)
        self.counts[frame.stream] += 1
        if self._is_visible(frame):
            self._render(frame)
            self._scroll_to_end()

    def _is_visible(self, frame: Frame) -> bool:
        return self.visible_streams is None or frame.stream in self.visible_streams

    def _render(self, frame: Frame):
        base_color = STREAM_COLORS.get(frame.stream, DEFAULT_COLOR)
        cursor = self.logs_text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)

        fmt = QTextCharFormat()
        fmt.setForeground(base_color)

        if self.show_stream:
            prefix_fmt = QTextCharFormat()
            prefix_fmt.setForeground(BRIGHT_PALETTE[0])
            cursor.insertText(f"[{frame.stream.name.lower()}] ", prefix_fmt)

        last_pos = 0
        for match in SGR_PATTERN.finditer(frame.text):
            if match.start() > last_pos:
                cursor.insertText(frame.text[last_pos:match.start()], fmt)
            apply_sgr(fmt, match.group(1), base_color)
            last_pos = match.end()

        if last_pos < len(frame.text):
            cursor.insertText(frame.text[last_pos:], fmt)

        cursor.insertText('\n', QTextCharFormat())
        self.line_count += 1

    def _scroll_to_end(self):
        if self.auto_scroll:
            scrollbar = self.logs_text.verticalScrollBar()
            if scrollbar:
                scrollbar.setValue(scrollbar.maximum())

    def rerender(self):
        """Redraw stored frames with the current filter and prefix settings"""
        self.logs_text.clear()
        self.line_count = 0
        for frame in self.frames:
            if self._is_visible(frame):
                self._render(frame)
        self._scroll_to_end()

    def set_stream_filter(self, streams: Optional[List[Stream]]):
        """Show only frames of the given streams (None: all)"""
        self.visible_streams = set(streams) if streams is not None else None
        self.rerender()

    def set_show_stream(self, enabled: bool):
        self.show_stream = enabled
        self.rerender()

    def clear(self):
        """Drop stored frames and clear the display"""
        self.frames.clear()
        self.counts = {stream: 0 for stream in Stream}
        self.logs_text.clear()
        self.line_count = 0

    def set_auto_scroll(self, enabled: bool):
        self.auto_scroll = enabled
        if self.show_controls:
            self.auto_scroll_check.setChecked(enabled)

    def set_wrap_mode(self, enabled: bool):
        if enabled:
            self.logs_text.setLineWrapMode(QTextEdit.LineWrapMode.WidgetWidth)
        else:
            self.logs_text.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)

        if self.show_controls:
            self.wrap_logs_check.setChecked(enabled)

    def _on_stream_filter_changed(self, index: int):
        self.set_stream_filter(STREAM_FILTERS[index][1])

    def _on_show_stream_changed(self, state):
        self.set_show_stream(state == Qt.CheckState.Checked.value)

    def _on_wrap_logs_changed(self, state):
        if state == Qt.CheckState.Checked.value:
            self.logs_text.setLineWrapMode(QTextEdit.LineWrapMode.WidgetWidth)
        else:
            self.logs_text.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)

    def _on_auto_scroll_changed(self, state):
        self.auto_scroll = (state == Qt.CheckState.Checked.value)


class FrameReaderThread(QThread):
    """Thread pulling frames from a container logs session"""

    frame_received = pyqtSignal(object)  # Frame
    finished_signal = pyqtSignal(bool, str)  # success, message

    def __init__(self, client, container_id: str, follow: bool = True, tail: str = 'all',
                 tty: Optional[bool] = None):
        super().__init__()
        self.client = client
        self.container_id = container_id
        self.follow = follow
        self.tail = tail
        self.tty = tty
        self.running = True
        self.log_stream = None

    def run(self):
        frames_read = 0
        try:
            container = self.client.containers.get(self.container_id)
            options = {'stream': True, 'follow': self.follow, 'tail': self.tail}
            if self.tty is not None:
                options['tty'] = self.tty
            self.log_stream = container.logs(**options)

            for frame in self.log_stream:
                if not self.running:
                    break
                self.frame_received.emit(frame)
                frames_read += 1

            self.finished_signal.emit(True, f"Stream ended after {frames_read} lines")

        except (DockerException, OSError, ValueError) as e:
            if not self.running:
                # Connection closed by stop()
                self.finished_signal.emit(True, f"Stream stopped after {frames_read} lines")
                return
            logger.error(f"Error reading logs of {self.container_id}: {e}")
            self.finished_signal.emit(False, f"Error: {e}")

    def stop(self):
        """Stop reading and release the connection"""
        self.running = False
        if self.log_stream is not None:
            self.log_stream.close()

"""
GUI Package for dockmux
PyQt6 viewer for container output (optional 'gui' extra)
"""

import sys

from .log_viewer_widget import LogViewerWidget, FrameReaderThread
from .logs_window import ContainerLogsWindow


def run_logs_viewer(container_id: str, settings=None) -> int:
    """
    Open a logs window for a container and run the Qt event loop

    Args:
        container_id: Container name or ID
        settings: SettingsManager (default: user settings file)

    Returns:
        Qt application exit code
    """
    from PyQt6.QtWidgets import QApplication
    from ..api import DockerClient
    from ..settings_manager import SettingsManager

    settings = settings or SettingsManager()
    client = DockerClient.from_settings(settings)

    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    window = ContainerLogsWindow(
        client,
        container_id,
        follow=True,
        tail=str(settings.get('tail', 'all'))
    )
    window.show()
    window.start_logs()

    return app.exec()


__all__ = ['LogViewerWidget', 'FrameReaderThread', 'ContainerLogsWindow', 'run_logs_viewer']

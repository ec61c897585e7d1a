import logging
import os

from PySide6.QtCore import QObject, QThread, Signal
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QFileDialog,
    QComboBox,
    QPlainTextEdit,
    QMessageBox,
    QProgressBar,
)

from zipbackup.config import APP_NAME, APP_VERSION, parse_size_cap
from zipbackup.core.backup import run_copy, run_package
from zipbackup.core.settings import BackupSettings, load_settings, save_settings, size_cap_labels
from zipbackup.core.staging import is_packaging_ready
from zipbackup.errors import BackupError

logger = logging.getLogger(__name__)


class BackupWorker(QObject):
    progress = Signal(int, int)     # processed, total
    finished = Signal(object)       # CopySummary | PackageSummary
    failed = Signal(str)

    def __init__(self, mode, source_root="", destination_root="", cap_bytes=0):
        super().__init__()
        self.mode = mode  # "copy" | "package"
        self.source_root = source_root
        self.destination_root = destination_root
        self.cap_bytes = cap_bytes

    def _progress(self, processed, total):
        self.progress.emit(processed, total)

    def run(self):
        try:
            if self.mode == "copy":
                summary = run_copy(self.source_root, self.destination_root, progress_cb=self._progress)
            else:
                summary = run_package(self.destination_root, self.cap_bytes, progress_cb=self._progress)
        except BackupError as e:
            self.failed.emit(str(e))
            return
        except OSError as e:
            logger.exception("Operation %s failed", self.mode)
            self.failed.emit(str(e))
            return
        except Exception as e:
            # the thread only quits on finished/failed, so always emit one
            logger.exception("Unexpected error during %s", self.mode)
            self.failed.emit(f"Unexpected error: {e}")
            return
        self.finished.emit(summary)


class MainWindow(QMainWindow):
    def __init__(self, settings_dir=None):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} (v{APP_VERSION})")
        self.setMinimumSize(640, 420)

        self._settings_dir = settings_dir
        self._thread = None
        self._worker = None
        self._mode = None

        root = QWidget()
        self.setCentralWidget(root)

        main_layout = QVBoxLayout(root)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(10)

        # -------------------------
        # Source / Destination rows
        # -------------------------
        self.source_edit = QLineEdit()
        self.source_edit.setPlaceholderText("Select the folder to back up...")
        self.source_edit.editingFinished.connect(self.refresh_actions)

        btn_source = QPushButton("Browse...")
        btn_source.clicked.connect(self.pick_source_folder)

        source_row = QHBoxLayout()
        source_row.addWidget(QLabel("Source:"))
        source_row.addWidget(self.source_edit, 1)
        source_row.addWidget(btn_source)

        self.dest_edit = QLineEdit()
        self.dest_edit.setPlaceholderText("Select where archives are written...")
        self.dest_edit.editingFinished.connect(self.refresh_actions)

        btn_dest = QPushButton("Browse...")
        btn_dest.clicked.connect(self.pick_dest_folder)

        dest_row = QHBoxLayout()
        dest_row.addWidget(QLabel("Destination:"))
        dest_row.addWidget(self.dest_edit, 1)
        dest_row.addWidget(btn_dest)

        main_layout.addLayout(source_row)
        main_layout.addLayout(dest_row)

        # -------------------------
        # Size cap + actions
        # -------------------------
        action_row = QHBoxLayout()

        self.size_combo = QComboBox()
        self.size_combo.addItems(size_cap_labels())

        action_row.addWidget(QLabel("ZIP size:"))
        action_row.addWidget(self.size_combo)
        action_row.addStretch(1)

        self.btn_copy = QPushButton("Copy Files")
        self.btn_copy.clicked.connect(self.on_copy_clicked)

        self.btn_package = QPushButton("Compress")
        self.btn_package.setEnabled(False)
        self.btn_package.clicked.connect(self.on_package_clicked)

        action_row.addWidget(self.btn_copy)
        action_row.addWidget(self.btn_package)

        main_layout.addLayout(action_row)

        # -------------------------
        # Progress + log
        # -------------------------
        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        main_layout.addWidget(self.progress)

        self.log_box = QPlainTextEdit()
        self.log_box.setReadOnly(True)
        self.log_box.setPlaceholderText("Logs will appear here...")
        main_layout.addWidget(self.log_box, 1)

        self.source_edit.setObjectName("source_edit")
        self.dest_edit.setObjectName("dest_edit")
        self.size_combo.setObjectName("size_combo")
        self.btn_copy.setObjectName("btn_copy")
        self.btn_package.setObjectName("btn_package")
        self.progress.setObjectName("progress")
        self.log_box.setObjectName("log_box")

        self._apply_settings(load_settings(self._settings_dir))
        self.refresh_actions()
        self.log("Ready. Choose folders, then Copy Files / Compress.")

    # -------------------------
    # UI Helpers
    # -------------------------
    def log(self, msg: str):
        self.log_box.appendPlainText(msg)

    def _apply_settings(self, settings: BackupSettings):
        self.source_edit.setText(settings.source_root)
        self.dest_edit.setText(settings.destination_root)
        if settings.size_cap_label in size_cap_labels():
            self.size_combo.setCurrentText(settings.size_cap_label)

    def _current_settings(self) -> BackupSettings:
        return BackupSettings(
            source_root=self.source_edit.text().strip(),
            destination_root=self.dest_edit.text().strip(),
            size_cap_label=self.size_combo.currentText(),
        )

    def _save_settings(self):
        try:
            save_settings(self._current_settings(), self._settings_dir)
        except OSError as e:
            self.log(f"Could not save settings: {e}")

    def is_busy(self) -> bool:
        return self._thread is not None

    def refresh_actions(self):
        """Enable Copy or Compress based on what is on disk right now."""
        if self.is_busy():
            self.btn_copy.setEnabled(False)
            self.btn_package.setEnabled(False)
            return

        ready = is_packaging_ready(self.dest_edit.text().strip())
        self.btn_package.setEnabled(ready)
        self.btn_copy.setEnabled(not ready)

    def pick_source_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Source Folder")
        if folder:
            self.source_edit.setText(os.path.normpath(folder))
            self.log(f"Source folder set: {folder}")
            self.refresh_actions()

    def pick_dest_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Destination Folder")
        if folder:
            self.dest_edit.setText(os.path.normpath(folder))
            self.log(f"Destination folder set: {folder}")
            self.refresh_actions()

    # -------------------------
    # Operations
    # -------------------------
    def on_copy_clicked(self):
        if self.is_busy():
            return
        settings = self._current_settings()
        if not settings.source_root or not settings.destination_root:
            QMessageBox.warning(self, "Missing Folders", "Select both the source and the destination folders.")
            return

        self.log("---- COPY START ----")
        self.log(f"Source:      {settings.source_root}")
        self.log(f"Destination: {settings.destination_root}")
        self._start(BackupWorker("copy", settings.source_root, settings.destination_root))

    def on_package_clicked(self):
        if self.is_busy():
            return
        settings = self._current_settings()
        if not settings.destination_root:
            QMessageBox.warning(self, "Missing Folder", "Select the destination folder.")
            return

        cap_bytes = parse_size_cap(settings.size_cap_label)
        self.log("---- COMPRESS START ----")
        self.log(f"ZIP size: {settings.size_cap_label}")
        self._start(BackupWorker("package", destination_root=settings.destination_root, cap_bytes=cap_bytes))

    def _start(self, worker: BackupWorker):
        self._save_settings()
        self.progress.setValue(0)

        # Parented so dropping our reference never destroys a running thread
        self._thread = QThread(self)
        self._worker = worker
        self._mode = worker.mode
        self._worker.moveToThread(self._thread)
        self.refresh_actions()

        self._thread.started.connect(self._worker.run)
        self._worker.progress.connect(self._on_progress)
        self._worker.finished.connect(self._on_finished)
        self._worker.failed.connect(self._on_failed)

        self._worker.finished.connect(self._thread.quit)
        self._worker.failed.connect(self._thread.quit)
        self._worker.finished.connect(self._worker.deleteLater)
        self._worker.failed.connect(self._worker.deleteLater)
        self._thread.finished.connect(self._on_thread_finished)
        self._thread.finished.connect(self._thread.deleteLater)

        self._thread.start()

    def _on_progress(self, processed: int, total: int):
        pct = int((processed / max(total, 1)) * 100)
        self.progress.setValue(pct)

    def _on_thread_finished(self):
        self._thread = None
        self._worker = None
        self.refresh_actions()

    def _on_finished(self, summary):
        self.progress.setValue(100)

        if self._mode == "copy":
            self.log(f"Copied {summary.copied} file(s) to {summary.staging_root}")
            self.log("---- COPY DONE ----")
            QMessageBox.information(self, "Success", "Copy finished successfully.")
            return

        for archive in summary.archives:
            self.log(f"{archive.name}: {len(archive.entries)} file(s)")
        if summary.failed:
            self.log(f"{summary.failed} file(s) could not be archived; see {summary.log_path}")
        self.log("---- COMPRESS DONE ----")
        QMessageBox.information(self, "Success", "Compression finished successfully.")

    def _on_failed(self, message: str):
        self.log(f"ERROR: {message}")
        QMessageBox.critical(self, "Error", message)

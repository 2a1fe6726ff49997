"""
ui.py
PySide6 window for folderplay, Windows 95 retro style
Implements the view side of PlaybackController and forwards user input to it
"""

import os
import threading

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QLabel, QPushButton, QSlider, QScrollArea,
    QVBoxLayout, QHBoxLayout, QGridLayout, QFrame, QFileDialog,
    QMessageBox, QSizePolicy,
)
from PySide6.QtGui import QFont, QKeySequence, QShortcut
from PySide6.QtCore import Qt, QTimer, Signal

import events
from audio_engine import format_time
from controller import NO_FOLDER_TEXT, NOTHING_PLAYING_TEXT, PlaybackController
from logging_config import get_logger, EngineError, FolderScanError

logger = get_logger('ui')

# Seek slider works in milliseconds so drags land on fractional seconds
SLIDER_SCALE = 1000
TRANSPORT_HEIGHT = 35


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _display_line(text, point_size, bold=True) -> QLabel:
    # Colours come from the "lcd" rules in the window stylesheet
    line = QLabel(text)
    line.setObjectName("lcd")
    line.setFont(QFont("Courier", point_size, QFont.Weight.Bold if bold else QFont.Weight.Normal))
    return line


def _transport_button(text, width, point_size=14) -> QPushButton:
    button = QPushButton(text)
    button.setFixedSize(width, TRANSPORT_HEIGHT)
    button.setFont(QFont("Arial", point_size, QFont.Weight.Bold))
    return button


# ---------------------------------------------------------------------------
# Track row: stores its playlist index for click handling
# ---------------------------------------------------------------------------

class _TrackRow(QWidget):
    def __init__(self, playlist_idx: int, name: str, on_click, bg: str, parent=None):
        super().__init__(parent)
        self._playlist_idx = playlist_idx
        self._on_click = on_click
        self._bg_normal = bg
        self._active = False

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 1, 0, 1)
        layout.setSpacing(0)

        self._num_lbl = QLabel(f"{playlist_idx + 1:02d}.")
        self._name_lbl = QLabel(name)
        for lbl in (self._num_lbl, self._name_lbl):
            lbl.setFont(QFont("Arial", 10))

        self._num_lbl.setFixedWidth(34)
        self._num_lbl.setContentsMargins(8, 0, 0, 0)
        self._name_lbl.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)

        layout.addWidget(self._num_lbl)
        layout.addWidget(self._name_lbl)

        self._apply_colors(False)

    def _apply_colors(self, active: bool):
        bg = "#000080" if active else self._bg_normal
        fg = "white" if active else "black"
        for widget in (self._num_lbl, self._name_lbl, self):
            widget.setStyleSheet(f"background: {bg}; color: {fg};")

    def set_active(self, active: bool):
        if self._active != active:
            self._active = active
            self._apply_colors(active)

    def mousePressEvent(self, _event):
        self._on_click(self._playlist_idx)


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

class PlayerWindow(QMainWindow):
    """Player window with Win95 retro styling."""

    # Scan results cross from the worker thread to the GUI thread here
    scanCompleted = Signal(object)

    WIN95_GRAY       = "#C0C0C0"
    WIN95_DARK_GRAY  = "#808080"
    WIN95_LIGHT_GRAY = "#DFDFDF"
    LCD_GREEN        = "#00FF00"
    LCD_BG           = "#000000"
    TRACKLIST_BG     = "#A8A8A8"
    ACTIVE_BLUE      = "#000080"

    def __init__(self, engine, config):
        super().__init__()
        self.engine = engine
        self.config = config
        self.controller = PlaybackController(
            engine, self,
            shuffle_policy=config.shuffle_policy,
            extensions=config.audio_extensions,
        )
        self._track_rows: list[_TrackRow] = []
        self._duration = 0.0

        self.setWindowTitle("folderplay")
        self.setFixedSize(720, 520)

        self._apply_win95_stylesheet()

        central = QWidget()
        self.setCentralWidget(central)
        self.create_widgets(central)

        self._bind_keyboard_shortcuts()
        self.setAcceptDrops(True)

        self.scanCompleted.connect(self._on_scan_completed)

        # Engine notifications
        self._poll_timer = QTimer(self)
        self._poll_timer.timeout.connect(self._poll_engine)
        self._poll_timer.start(config.poll_interval_ms)

        # Progress sync, started/stopped by the controller
        self._progress_timer = QTimer(self)
        self._progress_timer.setInterval(config.progress_interval_ms)
        self._progress_timer.timeout.connect(lambda: self._dispatch(events.ProgressTick()))

        self.change_volume(self.volume_slider.value())

    # ------------------------------------------------------------------
    # Stylesheet
    # ------------------------------------------------------------------

    def _apply_win95_stylesheet(self):
        gray, dark, light = self.WIN95_GRAY, self.WIN95_DARK_GRAY, self.WIN95_LIGHT_GRAY
        self.setStyleSheet(f"""
            QWidget {{ background: {gray}; color: black; font-family: Arial; }}
            QFrame#lcdPanel {{ background: {self.LCD_BG}; border: 2px solid {dark}; }}
            QLabel#lcd {{ background: {self.LCD_BG}; color: {self.LCD_GREEN}; }}

            QPushButton {{ background: {light}; border: 2px outset {dark}; }}
            QPushButton:pressed {{ border-style: inset; }}
            QPushButton:checked {{ background: {self.ACTIVE_BLUE}; color: white; }}

            QSlider::groove:horizontal {{ height: 6px; background: {dark}; }}
            QSlider::sub-page:horizontal {{ background: {self.LCD_GREEN}; }}
            QSlider::handle:horizontal {{ width: 12px; margin: -6px 0; background: {light}; border: 1px solid {dark}; }}

            QScrollArea {{ border: 2px inset {dark}; }}
            QScrollBar::handle:vertical {{ background: {dark}; min-height: 20px; }}
        """)

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def create_widgets(self, parent: QWidget):
        main_layout = QHBoxLayout(parent)
        main_layout.setContentsMargins(10, 10, 10, 10)
        main_layout.setSpacing(10)

        left_frame = self._build_left_panel()
        left_frame.setFixedWidth(350)
        main_layout.addWidget(left_frame)
        main_layout.addWidget(self._build_track_list(), stretch=1)

    def _build_left_panel(self) -> QWidget:
        frame = QWidget()
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        # LCD display
        lcd_frame = QFrame()
        lcd_frame.setFixedHeight(110)
        lcd_frame.setObjectName("lcdPanel")
        lcd_layout = QVBoxLayout(lcd_frame)
        lcd_layout.setContentsMargins(8, 5, 8, 5)
        lcd_layout.setSpacing(2)

        self.folder_display = _display_line(NO_FOLDER_TEXT, 9, bold=False)
        self.song_display = _display_line(NOTHING_PLAYING_TEXT, 11)
        self.time_display = _display_line("0:00 / 0:00", 16)
        for lbl in (self.folder_display, self.song_display, self.time_display):
            lcd_layout.addWidget(lbl)
        layout.addWidget(lcd_frame)

        # Transport controls
        controls_w = QWidget()
        controls_grid = QGridLayout(controls_w)
        controls_grid.setContentsMargins(0, 10, 0, 0)
        controls_grid.setSpacing(3)

        self.prev_btn   = _transport_button("⏮", 50)
        self.play_btn   = _transport_button("Play", 80, 12)
        self.next_btn   = _transport_button("⏭", 50)
        self.folder_btn = _transport_button("📁", 50, 12)

        self.prev_btn.clicked.connect(self.previous_track)
        self.play_btn.clicked.connect(self.play_pause)
        self.next_btn.clicked.connect(self.next_track)
        self.folder_btn.clicked.connect(self.load_folder)

        for col, btn in enumerate([self.prev_btn, self.play_btn, self.next_btn, self.folder_btn]):
            controls_grid.addWidget(btn, 0, col)

        self.shuffle_btn = QPushButton("🔀 Shuffle")
        self.shuffle_btn.setCheckable(True)
        self.shuffle_btn.setFixedHeight(28)
        self.shuffle_btn.setFont(QFont("Arial", 11))
        self.shuffle_btn.toggled.connect(self.toggle_shuffle)
        controls_grid.addWidget(self.shuffle_btn, 1, 0, 1, 4)

        layout.addWidget(controls_w, 0, Qt.AlignmentFlag.AlignHCenter)

        # Seek bar
        seek_w = QWidget()
        seek_lay = QHBoxLayout(seek_w)
        seek_lay.setContentsMargins(10, 10, 10, 5)

        self.seek_slider = QSlider(Qt.Orientation.Horizontal)
        self.seek_slider.setRange(0, 0)
        self.seek_slider.sliderPressed.connect(self._seek_start)
        self.seek_slider.sliderReleased.connect(self._seek_end)
        self.seek_slider.valueChanged.connect(self._on_seek_drag)
        seek_lay.addWidget(self.seek_slider)
        layout.addWidget(seek_w)

        # Volume
        vol_w = QWidget()
        vol_lay = QHBoxLayout(vol_w)
        vol_lay.setContentsMargins(0, 5, 0, 5)

        vol_label = QLabel("VOL")
        vol_label.setFont(QFont("Arial", 10, QFont.Weight.Bold))
        vol_lay.addWidget(vol_label)

        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setFixedWidth(200)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(self.config.initial_volume)
        self.volume_slider.valueChanged.connect(self.change_volume)
        vol_lay.addWidget(self.volume_slider)

        self.volume_label = QLabel(f"{self.config.initial_volume}%")
        self.volume_label.setFont(QFont("Arial", 10, QFont.Weight.Bold))
        self.volume_label.setFixedWidth(40)
        vol_lay.addWidget(self.volume_label)

        layout.addWidget(vol_w, 0, Qt.AlignmentFlag.AlignHCenter)
        layout.addStretch()

        return frame

    def _build_track_list(self) -> QWidget:
        frame = QWidget()
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        tl_label = QLabel("TRACK LIST")
        tl_label.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        tl_label.setContentsMargins(0, 0, 0, 5)
        layout.addWidget(tl_label)

        self._tracklist_scroll = QScrollArea()
        self._tracklist_scroll.setWidgetResizable(True)
        self._tracklist_scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)

        self._tracklist_inner = QWidget()
        self._tracklist_inner.setStyleSheet(f"background: {self.TRACKLIST_BG};")
        self._tracklist_layout = QVBoxLayout(self._tracklist_inner)
        self._tracklist_layout.setContentsMargins(0, 0, 0, 0)
        self._tracklist_layout.setSpacing(0)
        self._tracklist_layout.addStretch()

        self._tracklist_scroll.setWidget(self._tracklist_inner)
        layout.addWidget(self._tracklist_scroll, stretch=1)
        return frame

    # ------------------------------------------------------------------
    # View interface used by PlaybackController
    # ------------------------------------------------------------------

    def set_folder_text(self, text):
        self.folder_display.setText(text)

    def set_now_playing_text(self, text):
        if len(text) > 38:
            text = text[:35] + "..."
        self.song_display.setText(text)

    def set_playing(self, playing):
        self.play_btn.setText("Pause" if playing else "Play")

    def set_tracks(self, titles):
        self._track_rows.clear()
        while self._tracklist_layout.count() > 1:  # keep the trailing stretch
            item = self._tracklist_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        for idx, title in enumerate(titles):
            row = _TrackRow(idx, title, self.play_track_from_list, self.TRACKLIST_BG)
            self._tracklist_layout.insertWidget(idx, row)
            self._track_rows.append(row)
        if not titles:
            self.set_progress_range(0.0)

    def highlight_track(self, index):
        for row in self._track_rows:
            row.set_active(row._playlist_idx == index)
            if row._playlist_idx == index:
                self._tracklist_scroll.ensureWidgetVisible(row)

    def show_notice(self, text):
        QMessageBox.information(self, "folderplay", text)

    def show_error(self, text):
        QMessageBox.warning(self, "folderplay", text)

    def set_progress_range(self, duration):
        self._duration = duration or 0.0
        self.seek_slider.blockSignals(True)
        self.seek_slider.setRange(0, int(self._duration * SLIDER_SCALE))
        self.seek_slider.setValue(0)
        self.seek_slider.blockSignals(False)
        self.time_display.setText(f"0:00 / {format_time(self._duration)}")

    def set_progress(self, position):
        self.seek_slider.blockSignals(True)
        self.seek_slider.setValue(int(position * SLIDER_SCALE))
        self.seek_slider.blockSignals(False)
        self.time_display.setText(f"{format_time(position)} / {format_time(self._duration)}")

    def start_progress_timer(self):
        self._progress_timer.start()

    def stop_progress_timer(self):
        self._progress_timer.stop()

    # ------------------------------------------------------------------
    # Controller calls
    # ------------------------------------------------------------------

    def _run(self, action, *args):
        """Call into the controller, reporting engine failures in a dialog"""
        try:
            action(*args)
        except EngineError as e:
            self.set_playing(False)
            self.show_error(str(e))

    def _dispatch(self, event):
        self._run(self.controller.dispatch, event)

    def _poll_engine(self):
        for event in self.engine.poll():
            self._dispatch(event)

    # ------------------------------------------------------------------
    # Playback controls
    # ------------------------------------------------------------------

    def play_pause(self):
        self._run(self.controller.toggle_play_pause)

    def previous_track(self):
        self._run(self.controller.previous_track)

    def next_track(self):
        self._run(self.controller.next_track)

    def play_track_from_list(self, index: int):
        self._run(self.controller.play_index, index)

    def toggle_shuffle(self, checked: bool):
        self._run(self.controller.set_shuffle, checked)

    def change_volume(self, value: int):
        self.controller.set_volume(value)
        self.volume_label.setText(f"{value}%")

    # ------------------------------------------------------------------
    # Seek
    # ------------------------------------------------------------------

    def _seek_start(self):
        self._dispatch(events.SeekStarted())

    def _on_seek_drag(self, value: int):
        if self.seek_slider.isSliderDown():
            self.time_display.setText(
                f"{format_time(value / SLIDER_SCALE)} / {format_time(self._duration)}")
            self._dispatch(events.SeekMoved(value / SLIDER_SCALE))

    def _seek_end(self):
        self._dispatch(events.SeekReleased(self.seek_slider.value() / SLIDER_SCALE))

    # ------------------------------------------------------------------
    # Keyboard shortcuts
    # ------------------------------------------------------------------

    def _bind_keyboard_shortcuts(self):
        QShortcut(QKeySequence(Qt.Key.Key_Space), self).activated.connect(self.play_pause)
        QShortcut(QKeySequence(Qt.Key.Key_Left),  self).activated.connect(self.previous_track)
        QShortcut(QKeySequence(Qt.Key.Key_Right), self).activated.connect(self.next_track)
        QShortcut(QKeySequence(Qt.Key.Key_Up),    self).activated.connect(self._kb_volume_up)
        QShortcut(QKeySequence(Qt.Key.Key_Down),  self).activated.connect(self._kb_volume_down)

    def _kb_volume_up(self):
        self.volume_slider.setValue(min(100, self.volume_slider.value() + 5))

    def _kb_volume_down(self):
        self.volume_slider.setValue(max(0, self.volume_slider.value() - 5))

    # ------------------------------------------------------------------
    # Folder loading
    # ------------------------------------------------------------------

    def load_folder(self):
        folder_path = QFileDialog.getExistingDirectory(self, "Select Music Folder")
        if folder_path:
            self.start_folder_scan(folder_path)

    def start_folder_scan(self, folder_path):
        generation = self.controller.request_folder(folder_path)

        def _scan():
            try:
                files = self.controller.scan(folder_path)
            except FolderScanError as e:
                self.scanCompleted.emit(events.ScanFailed(generation, folder_path, e))
                return
            self.scanCompleted.emit(events.ScanFinished(generation, folder_path, tuple(files)))

        threading.Thread(target=_scan, daemon=True).start()

    def _on_scan_completed(self, event):
        self._dispatch(event)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        folders = [url.toLocalFile() for url in event.mimeData().urls()
                   if os.path.isdir(url.toLocalFile())]
        if folders:
            self.start_folder_scan(folders[0])

    def closeEvent(self, event):
        self._poll_timer.stop()
        self._progress_timer.stop()
        self.engine.close()
        super().closeEvent(event)

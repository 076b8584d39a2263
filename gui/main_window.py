"""Main application window: toolbar, scale slider, side-by-side previews, status bar."""

import logging
import os
import threading
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from typing import Optional

from models.fixer_config import FixerConfig
from models.session import FixerSession
from gui.preview_pane import PreviewPane
from export.png_export import ExportError
from utils.image_loader import IMAGE_FILETYPES, ImageLoadError, load_image
from utils.image_utils import format_scale, snap_scale

logger = logging.getLogger(__name__)

TIP_TEXT = (
    "Tip: Adjust the slider until the QR code appears square and the positioning "
    "squares (three corners) look properly proportioned. Then try scanning it "
    "with your phone's QR code reader."
)


class MainWindow:
    """Top-level application window."""

    def __init__(self, root: tk.Tk, config: Optional[FixerConfig] = None):
        self.root = root
        self.root.title("QR Code Horizontal Scaling Fixer")
        self.root.geometry("980x640")
        self.root.minsize(720, 480)

        # Core state
        self.session = FixerSession(config)
        self.config = self.session.config

        self._build_menu()
        self._build_toolbar()
        self._build_scale_bar()
        self._build_main_panes()
        self._build_status_bar()

        self._update_controls()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_menu(self):
        menubar = tk.Menu(self.root)
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        file_menu.add_command(label="Upload Image...", command=self._open_image)
        file_menu.add_command(label="Download Fixed QR Code...", command=self._save_image)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.root.quit)
        menubar.add_cascade(label="File", menu=file_menu)
        self.file_menu = file_menu

        help_menu = tk.Menu(menubar, tearoff=0)
        help_menu.add_command(label="About", command=self._show_about)
        menubar.add_cascade(label="Help", menu=help_menu)

    def _build_toolbar(self):
        toolbar = ttk.Frame(self.root, style="Toolbar.TFrame")
        toolbar.pack(fill=tk.X, pady=(0, 1))

        pad = dict(padx=2, pady=4)
        ttk.Button(toolbar, text="Upload Compressed QR Code", style="Accent.TButton",
                   command=self._open_image).pack(side=tk.LEFT, **pad)

        ttk.Separator(toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=6, pady=4)

        self.btn_download = ttk.Button(toolbar, text="Download Fixed QR Code",
                                       style="Toolbar.TButton", command=self._save_image)
        self.btn_download.pack(side=tk.LEFT, **pad)
        self.btn_reset = ttk.Button(toolbar, text="Reset to 1:1",
                                    style="Toolbar.TButton", command=self._reset_scale)
        self.btn_reset.pack(side=tk.LEFT, **pad)

    def _build_scale_bar(self):
        bar = ttk.Frame(self.root, padding=(10, 6))
        bar.pack(fill=tk.X)

        self.scale_label = ttk.Label(bar, style="Header.TLabel")
        self.scale_label.pack(anchor=tk.W)

        self.scale_var = tk.DoubleVar(value=self.session.scale)
        self.slider = ttk.Scale(
            bar,
            from_=self.config.min_scale,
            to=self.config.max_scale,
            orient=tk.HORIZONTAL,
            variable=self.scale_var,
            command=self._on_slider,
        )
        self.slider.pack(fill=tk.X, pady=(4, 0))

        ends = ttk.Frame(bar)
        ends.pack(fill=tk.X)
        ttk.Label(ends, text=f"{self.config.min_scale:g}x (More compressed)",
                  style="Status.TLabel").pack(side=tk.LEFT)
        ttk.Label(ends, text=f"{self.config.max_scale:g}x (More stretched)",
                  style="Status.TLabel").pack(side=tk.RIGHT)

    def _build_main_panes(self):
        self.container = ttk.Frame(self.root)
        self.container.pack(fill=tk.BOTH, expand=True)

        # Shown until an image is loaded
        self.placeholder = ttk.Label(
            self.container,
            text="Upload your horizontally compressed QR code to begin",
            anchor=tk.CENTER,
        )

        self.panes = ttk.Frame(self.container)
        self.original_pane = PreviewPane(self.panes, "Original (Compressed)")
        self.original_pane.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(6, 3), pady=6)
        ttk.Separator(self.panes, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, pady=6)
        self.fixed_pane = PreviewPane(self.panes, "Fixed (Scaled)", bg="#dfe3fb")
        self.fixed_pane.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True, padx=(3, 6), pady=6)

        self.tip = ttk.Label(self.container, text=TIP_TEXT, wraplength=900, padding=(10, 4))

    def _build_status_bar(self):
        status_frame = ttk.Frame(self.root, style="Status.TFrame")
        status_frame.pack(fill=tk.X, side=tk.BOTTOM)
        self.status_bar = ttk.Label(
            status_frame, text="Ready", style="Status.TLabel", padding=(8, 4)
        )
        self.status_bar.pack(fill=tk.X)

    # ------------------------------------------------------------------
    # Control state
    # ------------------------------------------------------------------

    def _update_controls(self):
        """Enable scaling and export only once an image is loaded."""
        loaded = self.session.has_image
        state = "!disabled" if loaded else "disabled"
        for widget in (self.slider, self.btn_download, self.btn_reset):
            widget.state([state])
        self.file_menu.entryconfig(1, state=tk.NORMAL if loaded else tk.DISABLED)

        if loaded:
            self.placeholder.pack_forget()
            self.panes.pack(fill=tk.BOTH, expand=True)
            self.tip.pack(fill=tk.X)
        else:
            self.panes.pack_forget()
            self.tip.pack_forget()
            self.placeholder.pack(fill=tk.BOTH, expand=True)

        self.scale_label.config(text=f"Horizontal Scale: {self.session.readout}")

    def _redraw(self):
        """Show the latest surface; the session has already re-rendered it."""
        self.scale_var.set(self.session.scale)
        self.scale_label.config(text=f"Horizontal Scale: {self.session.readout}")
        self.fixed_pane.set_image(self.session.surface.image)
        self._update_status()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _open_image(self):
        path = filedialog.askopenfilename(
            title="Select QR Code Image",
            filetypes=IMAGE_FILETYPES,
        )
        if not path:
            return

        token = self.session.begin_upload()
        self._set_status(f"Loading {path}...")
        max_pixels = self.config.max_image_pixels

        def decode():
            try:
                img = load_image(path, max_pixels)
            except ImageLoadError as e:
                self.root.after(0, self._on_decode_failed, token, str(e))
                return
            self.root.after(0, self._on_decoded, token, img, path)

        threading.Thread(target=decode, daemon=True).start()

    def _on_decoded(self, token, img, path):
        if not self.session.complete_upload(token, img, os.path.basename(path)):
            return
        self.original_pane.set_image(img)
        self._update_controls()
        self._redraw()

    def _on_decode_failed(self, token, message):
        if not self.session.fail_upload(token, message):
            return
        self._update_status()
        messagebox.showerror("Error", f"Could not open image:\n{message}")
        self.session.dismiss_error()

    def _on_slider(self, value):
        if not self.session.has_image:
            return
        snapped = snap_scale(float(value), self.config.scale_step, self.config.min_scale)
        if snapped == self.session.scale:
            return
        self.session.set_scale(snapped)
        self._redraw()

    def _reset_scale(self):
        if not self.session.has_image:
            return
        self.session.reset()
        self._redraw()

    def _save_image(self):
        if not self.session.has_image:
            messagebox.showwarning("No Image", "Please upload a QR code image first.")
            return
        path = filedialog.asksaveasfilename(
            title="Save Fixed QR Code",
            initialfile=self.config.export_filename,
            defaultextension=".png",
            filetypes=[("PNG image", "*.png")],
        )
        if not path:
            return
        try:
            self.session.save_png(path)
        except ExportError as e:
            messagebox.showerror("Error", f"Could not save image:\n{e}")
            self.session.dismiss_error()
            return
        logger.info("Saved fixed QR code to %s", path)
        self._set_status(f"Saved {path} ({self._surface_text()})")

    def _show_about(self):
        messagebox.showinfo(
            "About",
            "QR Code Horizontal Scaling Fixer\n\n"
            "Stretch or compress a distorted QR code horizontally\n"
            "until it looks square, then save the result as PNG.",
        )

    # ------------------------------------------------------------------
    # Status bar
    # ------------------------------------------------------------------

    def _surface_text(self) -> str:
        w, h = self.session.surface.size
        return f"{w}x{h}"

    def _update_status(self):
        parts = []
        if self.session.has_image:
            img = self.session.image
            parts.append(f"Original: {img.width}x{img.height}")
            parts.append(f"Fixed: {self._surface_text()} at {format_scale(self.session.scale)}")
        if self.session.error:
            parts.append(f"Error: {self.session.error}")
        self.status_bar.config(text=" | ".join(parts) if parts else "Ready")

    def _set_status(self, text: str):
        self.status_bar.config(text=text)

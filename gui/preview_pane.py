"""Labelled canvas that shows a PIL image fitted to the available space."""

import tkinter as tk
from tkinter import ttk
from PIL import Image, ImageTk
from typing import Optional

from utils.image_utils import fit_size


class PreviewPane(ttk.Frame):
    """One side of the side-by-side comparison."""

    CANVAS_MAX_W = 420
    CANVAS_MAX_H = 360

    def __init__(self, parent, title: str, bg: str = "#d6d6d6", **kwargs):
        super().__init__(parent, **kwargs)
        self._image: Optional[Image.Image] = None
        self._photo: Optional[ImageTk.PhotoImage] = None

        header = ttk.Frame(self)
        header.pack(fill=tk.X, pady=(0, 4))
        ttk.Label(header, text=title, style="Header.TLabel").pack(side=tk.LEFT)
        self.size_label = ttk.Label(header, text="", style="Status.TLabel")
        self.size_label.pack(side=tk.RIGHT)

        self.canvas = tk.Canvas(
            self,
            width=self.CANVAS_MAX_W,
            height=self.CANVAS_MAX_H,
            bg=bg,
            highlightthickness=0,
        )
        self.canvas.pack(fill=tk.BOTH, expand=True)
        self.canvas.bind("<Configure>", self._on_canvas_resize)

    def set_image(self, img: Optional[Image.Image]):
        self._image = img
        self.refresh()

    def refresh(self):
        """Redraw the image centred in the canvas, shrunk to fit."""
        self.canvas.delete("all")
        if self._image is None:
            self.size_label.config(text="")
            return

        cw = self.canvas.winfo_width() or self.CANVAS_MAX_W
        ch = self.canvas.winfo_height() or self.CANVAS_MAX_H

        w, h = self._image.size
        display_w, display_h = fit_size(w, h, cw - 20, ch - 20)
        if (display_w, display_h) == (w, h):
            shown = self._image
        else:
            shown = self._image.resize((display_w, display_h), Image.LANCZOS)
        self._photo = ImageTk.PhotoImage(shown)
        self.canvas.create_image(cw / 2, ch / 2, image=self._photo, anchor=tk.CENTER)
        self.size_label.config(text=f"{w} × {h}")

    def _on_canvas_resize(self, event):
        """Redraw when canvas is resized."""
        self.after(50, self.refresh)

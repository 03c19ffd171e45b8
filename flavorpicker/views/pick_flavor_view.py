# views/pick_flavor_view.py
from __future__ import annotations

import tkinter as tk
from tkinter.ttk import Label, Frame, Scrollbar

from ..viewmodels.flavor_vm import PickFlavorViewModel

SWATCH_EMPTY = "#DDDDDD"


class PickFlavorApp:
    """Tk 'View' layer. No business logic lives here—it's all in the ViewModel."""

    def __init__(self, root: tk.Tk, base_dir: str):
        self.root = root
        self.base_dir = base_dir

        self.root.title("Pick a Flavor")
        self.root.geometry("420x460")

        # --- ViewModel ---
        # Results come back on a worker thread; hop onto the Tk loop before touching widgets.
        self.vm = PickFlavorViewModel(self.base_dir, dispatch=lambda fn: self.root.after(0, fn))
        self.vm.on_loading_started = self._on_loading_started
        self.vm.on_loading_ended = self._on_loading_ended
        self.vm.on_list_updated = self._on_list_updated
        self.vm.on_flavor_selected = self._on_flavor_selected
        self.vm.on_status = self._on_status

        # === Preview ===
        self.swatch = tk.Canvas(self.root, width=120, height=120, highlightthickness=0)
        self.swatch.pack(pady=(20, 5))
        self.name_var = tk.StringVar()
        Label(self.root, textvariable=self.name_var, font=("Helvetica", 16)).pack(pady=(0, 12))
        self._paint_swatch(None, None)

        # === Flavor list ===
        self.list_frame = Frame(self.root)
        self.list_frame.pack(fill="both", expand=True, padx=10)
        self.listbox = tk.Listbox(self.list_frame, exportselection=False, activestyle="none")
        self.listbox.pack(side="left", fill="both", expand=True)
        self.scrollbar = Scrollbar(self.list_frame, command=self.listbox.yview)
        self.scrollbar.pack(side="right", fill="y")
        self.listbox.config(yscrollcommand=self.scrollbar.set)
        self.listbox.bind("<<ListboxSelect>>", self.on_list_select)

        # === Status ===
        self.status_var = tk.StringVar()
        self.status_label = tk.Label(self.root, textvariable=self.status_var, anchor="w", fg="blue")
        self.status_label.pack(fill="x", padx=10, pady=(5, 10))

        self.root.protocol("WM_DELETE_WINDOW", self.on_close)

        self.vm.load_async()

    # ===== VM event handlers =====
    def _on_loading_started(self):
        self.listbox.config(state="disabled")

    def _on_loading_ended(self):
        self.listbox.config(state="normal")

    def _on_status(self, msg: str, is_error: bool):
        self.status_var.set(msg)
        self.status_label.config(fg="red" if is_error else "blue")

    def _on_list_updated(self, flavors):
        self.listbox.delete(0, "end")
        for flavor in flavors:
            self.listbox.insert("end", flavor.name)
        if not flavors:
            self.name_var.set("")
            self._paint_swatch(None, None)

    def _on_flavor_selected(self, flavor):
        self.name_var.set(flavor.name)
        self._paint_swatch(flavor.top_color, flavor.bottom_color)
        index = self.vm.selected_index
        if index is None:
            return
        self.listbox.selection_clear(0, "end")
        self.listbox.selection_set(index)
        self.listbox.see(index)

    # ===== UI actions =====
    def on_list_select(self, _event=None):
        picked = self.listbox.curselection()
        if picked:
            self.vm.select(picked[0])

    def on_close(self):
        self.vm.close()
        self.root.destroy()

    def _paint_swatch(self, top_color, bottom_color):
        self.swatch.delete("all")
        self.swatch.create_rectangle(0, 0, 120, 60, fill=top_color or SWATCH_EMPTY, width=0)
        self.swatch.create_rectangle(0, 60, 120, 120, fill=bottom_color or top_color or SWATCH_EMPTY, width=0)

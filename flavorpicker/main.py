# main.py
import os
import sys
import logging
import traceback
import tkinter as tk
from tkinter import messagebox

from flavorpicker import config_service
from flavorpicker.log_service import configure_logger, level_from_name
from flavorpicker.views.pick_flavor_view import PickFlavorApp

APP_ROOT = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger(__name__)


def run() -> None:
    config = config_service.load_config(APP_ROOT)
    configure_logger(level_from_name(config.get("log_level", "INFO")))
    root = tk.Tk()
    PickFlavorApp(root, APP_ROOT)
    root.mainloop()

def main() -> None:
    try:
        run()
    except Exception as e:
        # Show a concise dialog and also log the full traceback
        logger.error("".join(traceback.format_exception(type(e), e, e.__traceback__)))
        try:
            messagebox.showerror("Fatal Error", f"An unexpected error occurred:\n\n{e}")
        except tk.TclError:
            # No display to put the dialog on
            print("Fatal Error:", e, file=sys.stderr)
        raise  # re-raise so external runners/CI can detect failure

if __name__ == "__main__":
    main()

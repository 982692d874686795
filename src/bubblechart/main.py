"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Loads the dataset (the Model input).
2. Instantiates the SceneController (Controller).
3. Instantiates the Main Window (View) and passes the controller into it.
4. Prevents circular import errors by being the orchestrator.
"""
import logging
import sys

from PySide6.QtWidgets import QApplication

from bubblechart.config import DEFAULT_DATASET_PATH
from bubblechart.controller.scene import SceneController
from bubblechart.logging_config import setup_logging
from bubblechart.model.body import DatasetError
from bubblechart.model.io import load_dataset
from bubblechart.view.main_window import MainWindow, VISIBLE_APP_NAME

logger = logging.getLogger(__name__)


def main() -> None:
    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.INFO)

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(VISIBLE_APP_NAME)

    # 3. Load the dataset given on the command line, or the bundled sample
    path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DATASET_PATH
    try:
        records = load_dataset(path)
    except DatasetError as e:
        logger.error(f"Starting with an empty chart: {e}")
        records = ()

    # 4. Initialize the controller and the Main Window
    controller = SceneController()
    window = MainWindow(controller)
    controller.set_dataset(records)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

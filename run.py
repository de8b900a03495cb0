import os
import sys

import streamlit.web.cli as stcli

from photo_watermark.config import AppConfig


def main() -> int:
    if getattr(sys, "frozen", False):
        current_dir = sys._MEIPASS
    else:
        current_dir = os.path.dirname(os.path.abspath(__file__))
    file_path = os.path.join(current_dir, "watermark_app.py")
    cfg = AppConfig.load()

    sys.argv = [
        "streamlit",
        "run",
        file_path,
        f"--server.maxUploadSize={cfg.max_upload_mb}",
        "--global.developmentMode=false",
        "--client.toolbarMode=minimal",
    ]
    return stcli.main()


if __name__ == "__main__":
    sys.exit(main())

"""Flask server that stays alive"""

import sys

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

from app import create_app
from app.config import load_config


def main() -> None:
    config = load_config()
    app = create_app(bootstrap_runtime=True)

    print(f"Server starting on http://{config.host}:{config.port}")
    print("Press Ctrl+C to stop\n")

    try:
        app.run(host=config.host, port=config.port, debug=False, use_reloader=False)
    except KeyboardInterrupt:
        print("\nServer stopped by user")


if __name__ == "__main__":
    main()

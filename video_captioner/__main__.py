"""Package entry point for ``python -m video_captioner``.

Runs the CLI on an input video, or starts the HTTP API with ``--serve``.
"""

import logging
import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        from video_captioner.server.app import run_api
        run_api()
    else:
        from video_captioner.cli import main
        main()

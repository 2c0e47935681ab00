"""Development entrypoint delegating to the application package."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from applydesk.main import create_app

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

app = create_app()


if __name__ == "__main__":
    # One request at a time: the state layer assumes a single cooperative thread.
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5050")), debug=True, threaded=False)

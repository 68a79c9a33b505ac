# run.py
import logging
import os

from brewtrack.app import create_app

logger = logging.getLogger(__name__)

if __name__ == '__main__':
    app = create_app()
    logger.info("starting brewtrack API")
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), debug=False)

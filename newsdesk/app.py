"""
Newsdesk Server
===============

Run with:
    python -m newsdesk.app

Visit:
    http://localhost:3001/api/accounts  - Stored accounts
    http://localhost:3001/health        - Health check
"""

from flask import Flask

from newsdesk import Newsdesk
from newsdesk.core.config import Config


def create_app(config=None, store=None, client=None):
    """Create a Flask app with Newsdesk installed. `config` overrides Config defaults."""
    app = Flask(__name__)
    app.config['SECRET_KEY'] = Config.SECRET_KEY
    if config:
        app.config.update(config)

    Newsdesk(app, store=store, client=client)
    return app


if __name__ == '__main__':
    app = create_app()
    port = app.config['PORT']
    print(f"Server running at http://localhost:{port}")
    app.run(host='0.0.0.0', port=port)

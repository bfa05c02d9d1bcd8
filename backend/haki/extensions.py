# Overview: Flask extension instances for database, migrations and outbound mail.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

MAILER_EXTENSION_KEY = "haki.mailer"


def get_mailer():
    """Mailer bound to the running app by create_app()."""
    return current_app.extensions[MAILER_EXTENSION_KEY]

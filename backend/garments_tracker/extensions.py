# Overview: Flask extension instances for database and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

# Keys under app.extensions for the injected external collaborators.
IDENTITY_VERIFIER_KEY = "identity_verifier"
PAYMENT_GATEWAY_KEY = "payment_gateway"

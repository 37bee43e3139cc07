# backend/wsgi.py
import os

from garments_tracker import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=int(os.environ.get("PORT", "5000")))

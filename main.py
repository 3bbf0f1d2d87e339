import os
from app import create_app
from config import config_for

app = create_app(config_for(os.environ.get('APP_ENV')))

if __name__ == "__main__":
    # Use debug=False for production safety
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'
    port = int(os.environ.get('PORT', '3001'))
    app.run(host="0.0.0.0", port=port, debug=debug_mode)

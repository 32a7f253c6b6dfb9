import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of origins allowed to open a socket / call the API
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Delay between gameCountdown and gameStart (seconds)
    COUNTDOWN_SEC = float(os.environ.get('COUNTDOWN_SEC', '3'))
    # Puzzle generation retry caps
    REGION_MAX_ATTEMPTS = int(os.environ.get('REGION_MAX_ATTEMPTS', '20000'))
    BOARD_MAX_ATTEMPTS = int(os.environ.get('BOARD_MAX_ATTEMPTS', '500'))
    # Send the solved placement to clients along with the regions
    EXPOSE_SOLUTION = os.environ.get('EXPOSE_SOLUTION', 'false').lower() in ('1', 'true', 'yes')

import sys
import webbrowser
import signal
import os
from threading import Timer
from lorebook_editor import create_app
from lorebook_editor.extensions import socketio
from dotenv import load_dotenv

def open_browser():
    webbrowser.open_new(f"http://{os.getenv('HOST', '127.0.0.1')}:{int(os.getenv('PORT', 5000))}")

shutting_down = False

def shutdown_handler(signum, frame):
    global shutting_down
    if shutting_down:
        print("\nForcing immediate shutdown...")
        os._exit(1)
    else:
        shutting_down = True
        print("\nShutting down Lorebook Editor... (Press CTRL+C again to force)")
        sys.exit(0)

def main():
    print("Lorebook Editor starting...")
    load_dotenv(override=True)
    cli = sys.modules.get('flask.cli')
    if cli is not None:
        cli.show_server_banner = lambda *x: None

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    app = create_app()
    print("Lorebook Editor started.")
    if os.getenv("OPEN_BROWSER", "True").lower() == "true":
        Timer(0.5, open_browser).start()

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", 5000))
    print(f"Application is running on: http://{host}:{port}")
    socketio.run(app, host=host, port=port)

if __name__ == "__main__":
    main()

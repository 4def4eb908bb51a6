from bibliosys import create_app, start_sweeper

app = create_app()

if __name__ == "__main__":
    start_sweeper(app)
    app.run(host="127.0.0.1", port=3000, debug=app.config.get("DEBUG", False))

"""Local entrypoint.

Runs the draw API on localhost; the store is a sqlite file in the working
directory unless DATABASE_URL / MONGODB_URI say otherwise.
"""

from luckydraw import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8000, debug=False)

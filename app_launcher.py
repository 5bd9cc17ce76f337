import logging

import gradio as gr
import uvicorn

from backend.config import HOST, PORT
from gradio_frontend.prep_ui_gradio import demo
from main import app

# Mount the Gradio app to the FastAPI app; the JSON API stays under /api.
gr.mount_gradio_app(app, demo, path="/")

# Run the app
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)

"""
Logo compositing service.
Deploy this on Railway, Render, Fly.io, or any Python hosting platform.

Install dependencies:
pip install -e .

Run locally:
python app.py

Deploy to Railway/Render with Procfile:
web: gunicorn app:app
"""

import logging

from flask import Flask, request, jsonify

from config import load_settings
from overlay_logo import (
    ImageSource,
    MissingInputError,
    composite_logo,
    encode_png_base64,
    resolve_image,
)
from placement import Anchor, Size, build_placement_request, calculate_placement, derive_overlay_size

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = settings.max_content_length
app.config['DOWNLOAD_TIMEOUT'] = settings.download_timeout
app.config['PLACEMENT_DEFAULTS'] = settings.placement_defaults()
app.logger.setLevel(settings.log_level)


@app.after_request
def after_request(response):
    response.headers.add('Access-Control-Allow-Origin', '*')
    response.headers.add('Access-Control-Allow-Headers', 'Content-Type,Authorization')
    response.headers.add('Access-Control-Allow-Methods', 'GET,POST,OPTIONS')
    return response


@app.route('/health', methods=['GET'])
def health():
    return jsonify({
        'status': 'healthy',
        'service': 'logo-compositor',
    })


@app.route('/combine', methods=['POST'])
def combine():
    """Composite a logo onto a base image and return the result as base64 PNG."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    defaults = app.config['PLACEMENT_DEFAULTS']
    timeout = app.config['DOWNLOAD_TIMEOUT']

    base_source = ImageSource.from_payload(data, 'baseImage', 'base_image_url')
    logo_source = ImageSource.from_payload(data, 'logoImage', 'logo_image_url')

    try:
        base_source.require()
        logo_source.require()

        base_img = resolve_image(base_source, timeout=timeout)
        placement_request = build_placement_request(data, defaults)
        canvas = Size(*base_img.size)

        if placement_request.anchor is Anchor.NONE:
            app.logger.info("Position is none, returning %dx%d base with no overlay", canvas.width, canvas.height)
            return jsonify({'success': True, 'image': encode_png_base64(base_img)})

        logo_img = resolve_image(logo_source, timeout=timeout)
        overlay = derive_overlay_size(canvas, Size(*logo_img.size), data.get('logoSize'), defaults.logo_size)
        placement = calculate_placement(canvas, overlay, placement_request)

        app.logger.info(
            "Combining %dx%d base with logo at %s (%.1f, %.1f)",
            canvas.width, canvas.height, placement_request.anchor.value, placement.x, placement.y,
        )

        result = composite_logo(base_img, logo_img, placement, overlay)
        return jsonify({'success': True, 'image': encode_png_base64(result)})
    except MissingInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        app.logger.exception("Error combining images")
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port, debug=False)

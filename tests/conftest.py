import base64
from io import BytesIO

import pytest
import requests
from PIL import Image


def make_image(size, color, mode='RGB'):
    return Image.new(mode, size, color)


def to_base64(img, fmt='PNG'):
    buf = BytesIO()
    img.save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode('ascii')


def from_base64(data):
    return Image.open(BytesIO(base64.b64decode(data)))


class FakeResponse:
    def __init__(self, content=b'', status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def base_image():
    return make_image((200, 100), (0, 0, 255))


@pytest.fixture
def logo_image():
    return make_image((40, 20), (255, 0, 0, 255), mode='RGBA')


@pytest.fixture
def client():
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c

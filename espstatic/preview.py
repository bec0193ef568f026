"""
Preview server for the generated asset table.

Serves every registered asset the way the firmware does: the gzip bytes
straight from the array literal, with `Content-Encoding: gzip`. Handy for
checking a web build in a browser before flashing it.

Usage:
    python -m espstatic serve dist/ [--port 8080]
"""

from typing import List

from flask import Flask, Response, abort, jsonify
from flask_cors import CORS

from .compress import parse_array
from .log import log_message
from .registry import Asset

INDEX_ROUTE = "/index.html"


class PreviewServer:
    def __init__(self, assets: List[Asset]):
        self.app = Flask(__name__, static_folder=None)
        CORS(self.app)  # Allow cross-origin for development
        self.assets = {asset.route_path: asset for asset in assets}
        self.payloads = {
            asset.route_path: parse_array(asset.encoded_contents) for asset in assets
        }
        self._setup_routes()

    def _serve(self, route_path):
        asset = self.assets.get(route_path)
        if asset is None:
            abort(404)
        response = Response(self.payloads[route_path], mimetype=asset.mime_type)
        response.headers["Content-Encoding"] = "gzip"
        response.headers["Content-Length"] = str(asset.compressed_size)
        return response

    def _setup_routes(self):
        @self.app.route('/_esp32/assets', methods=['GET'])
        def list_assets():
            return jsonify([
                {
                    "path": asset.route_path,
                    "identifier": asset.identifier,
                    "type": asset.mime_type,
                    "size": asset.compressed_size,
                }
                for asset in self.assets.values()
            ])

        @self.app.route('/')
        def index():
            return self._serve(INDEX_ROUTE)

        @self.app.route('/<path:filename>')
        def static_files(filename):
            return self._serve('/' + filename)

    def run(self, host='0.0.0.0', port=8080, debug=False):
        print(f"\n{'='*60}")
        print("ESP32 static files preview")
        print(f"{'='*60}")
        print(f"Web UI:     http://localhost:{port}/")
        print(f"Assets:     http://localhost:{port}/_esp32/assets")
        print(f"Files:      {len(self.assets)}")
        print(f"{'='*60}\n")
        log_message(f"Serving {len(self.assets)} asset(s) on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug)

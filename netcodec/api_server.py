"""
api_server.py
~~~~~~~~~~~~~

Flask-based REST API for exporting and importing network parameters.

This module provides endpoints for:
- Creating networks with a given layer architecture
- Exporting a network as a text document or binary snapshot
- Importing a network from a text document or binary snapshot

The server uses:
- Flask for REST API endpoints
- Flask-CORS so browser frontends on other origins can call it
"""

import os
import sys
import uuid
import logging
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

# Local imports
from netcodec.binary_codec import decode_binary, encode_binary
from netcodec.exceptions import NetworkCodecError
from netcodec.network import Network
from netcodec.text_codec import decode_text, encode_text

# ============================================================================
# LOGGING SETUP
# ============================================================================

def configure_logging() -> None:
    """
    Set up logging based on environment.

    - In production: Show fewer logs (less noise) but keep important logs
    - In development: Show more detailed logs for debugging
    """
    log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    is_production = os.getenv('FLASK_ENV') == 'production'

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if is_production:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('netcodec').setLevel(logging.INFO)


configure_logging()
logger = logging.getLogger(__name__)

# ============================================================================
# FLASK APP SETUP
# ============================================================================

app = Flask(__name__)
CORS(app, resources={r"/api/*": {"origins": "*"}})

TEXT_FORMAT = 'text'
BINARY_FORMAT = 'binary'
SUPPORTED_FORMATS = (TEXT_FORMAT, BINARY_FORMAT)

# ============================================================================
# GLOBAL STATE
# ============================================================================

# Networks currently held in memory: {network_id: {'network': ..., 'name': ...}}
active_networks: Dict[str, Dict[str, Any]] = {}


def _network_summary(network_id: str, info: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'network_id': network_id,
        'name': info['name'],
        'architecture': info['network'].sizes
    }


def _requested_format() -> Optional[str]:
    """Return the ``format`` query parameter, or None if unsupported."""
    fmt = request.args.get('format', TEXT_FORMAT).lower()
    return fmt if fmt in SUPPORTED_FORMATS else None


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.route('/api/status', methods=['GET'])
def get_status():
    """Return server status and the number of networks in memory."""
    return jsonify({
        'status': 'online',
        'active_networks': len(active_networks)
    }), 200


@app.route('/api/networks', methods=['POST'])
def create_network():
    """
    Create a new network with randomly initialized parameters.

    Request body (optional):
        {'layer_sizes': [784, 30, 10], 'name': 'digits'}

    Returns:
        JSON with network_id, name and architecture
    """
    data = request.get_json(silent=True) or {}
    layer_sizes = data.get('layer_sizes', [784, 30, 10])
    name = data.get('name')

    # Validate: need inputs, at least one hidden layer, and outputs
    if (not isinstance(layer_sizes, list) or len(layer_sizes) < 3
            or not all(isinstance(s, int) and not isinstance(s, bool) and s > 0
                       for s in layer_sizes)):
        logger.warning(f"Invalid architecture requested: {layer_sizes}")
        return jsonify({
            'error': 'Invalid architecture. Need at least 3 positive layer sizes.'
        }), 400

    if name is not None and not isinstance(name, str):
        return jsonify({'error': 'name must be a string'}), 400

    network_id = str(uuid.uuid4())
    net = Network(layer_sizes, name=name)
    active_networks[network_id] = {'network': net, 'name': name}

    logger.info(f"Created network {network_id} with architecture {layer_sizes}")

    return jsonify({
        'network_id': network_id,
        'name': name,
        'architecture': net.sizes,
        'status': 'created'
    }), 201


@app.route('/api/networks', methods=['GET'])
def list_networks():
    """List all networks held in memory."""
    networks = [
        _network_summary(nid, info) for nid, info in active_networks.items()
    ]
    logger.debug(f"Listing {len(networks)} networks")
    return jsonify({'networks': networks}), 200


@app.route('/api/networks/<network_id>/export', methods=['GET'])
def export_network(network_id: str):
    """
    Export a network.

    Query parameters:
        format: 'text' (default) or 'binary'

    Returns:
        The encoded document as text/plain or application/octet-stream
    """
    if network_id not in active_networks:
        logger.warning(f"Export requested for non-existent network: {network_id}")
        return jsonify({'error': 'Network not found'}), 404

    fmt = _requested_format()
    if fmt is None:
        return jsonify({'error': f'format must be one of {list(SUPPORTED_FORMATS)}'}), 400

    info = active_networks[network_id]
    try:
        if fmt == TEXT_FORMAT:
            body = encode_text(info['network'], info['name'])
            mimetype = 'text/plain'
        else:
            body = encode_binary(info['network'], info['name'])
            mimetype = 'application/octet-stream'
    except NetworkCodecError as e:
        logger.error(f"Export of network {network_id} failed: {e}")
        return jsonify({'error': str(e)}), 400

    logger.info(f"Exported network {network_id} as {fmt}")
    return Response(body, status=200, mimetype=mimetype)


@app.route('/api/networks/import', methods=['POST'])
def import_network():
    """
    Import a network from a raw request body.

    Query parameters:
        format: 'text' (default) or 'binary'

    Returns:
        JSON with the new network_id, the decoded name and architecture
    """
    fmt = _requested_format()
    if fmt is None:
        return jsonify({'error': f'format must be one of {list(SUPPORTED_FORMATS)}'}), 400

    payload = request.get_data()
    try:
        if fmt == TEXT_FORMAT:
            net, name = decode_text(payload.decode('utf-8'))
        else:
            net, name = decode_binary(payload)
    except UnicodeDecodeError as e:
        logger.warning(f"Rejected import: body is not UTF-8 text ({e})")
        return jsonify({'error': 'Text documents must be UTF-8 encoded'}), 400
    except NetworkCodecError as e:
        logger.warning(f"Rejected import: {e}")
        return jsonify({'error': str(e)}), 400

    network_id = str(uuid.uuid4())
    active_networks[network_id] = {'network': net, 'name': name}

    logger.info(f"Imported network {network_id} ({fmt}) with architecture {net.sizes}")

    return jsonify({
        'network_id': network_id,
        'name': name,
        'architecture': net.sizes,
        'status': 'imported'
    }), 201


@app.route('/api/networks/<network_id>', methods=['DELETE'])
def delete_network_endpoint(network_id: str):
    """Delete a network from memory."""
    if network_id not in active_networks:
        logger.warning(f"Delete attempted for non-existent network: {network_id}")
        return jsonify({'error': 'Network not found'}), 404

    del active_networks[network_id]
    logger.info(f"Deleted network {network_id}")

    return jsonify({'network_id': network_id, 'deleted': True}), 200


# ============================================================================
# SERVER STARTUP
# ============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8000))
    is_production = os.getenv('FLASK_ENV') == 'production'

    logger.info(f"Starting server at http://localhost:{port}/")

    try:
        app.run(host='0.0.0.0', port=port, debug=not is_production)
    except OSError as e:
        if "Address already in use" in str(e):
            logger.error(f"Port {port} is already in use.")
            sys.exit(1)
        else:
            raise

"""
Coordinator server for the MapReduce word count.
Exposes worker registration, worker status and job execution over HTTP.
"""

import argparse
import logging

from flask import Flask, jsonify, request

from mrcount import config
from mrcount.coordinator.job import MapReduceJob
from mrcount.coordinator.registry import WorkerRegistry
from mrcount.errors import MapReduceError

logger = logging.getLogger(__name__)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def create_app(registry: WorkerRegistry = None, timeout: float = config.CALL_TIMEOUT) -> Flask:
    """Build the coordinator app around a registry (a fresh one by default)"""
    app = Flask(__name__)
    app.json.sort_keys = False
    registry = registry if registry is not None else WorkerRegistry()
    app.config['REGISTRY'] = registry
    app.config['CALL_TIMEOUT'] = timeout

    @app.errorhandler(MapReduceError)
    def handle_mapreduce_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.route('/register', methods=['POST'])
    def register():
        body = _json_body()
        result = registry.register(body.get('type'), body.get('address'))
        return jsonify({
            'success': True,
            'message': 'Registration successful' if result.created else 'Already registered',
            'workerId': result.worker_id,
            'totalMappers': result.total_mappers,
            'totalReducers': result.total_reducers,
        })

    @app.route('/unregister', methods=['POST'])
    def unregister():
        body = _json_body()
        registry.unregister(body.get('type'), body.get('address'))
        return jsonify({'success': True})

    @app.route('/workers', methods=['GET'])
    def workers():
        return jsonify(registry.snapshot().to_dict())

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'healthy', 'type': 'coordinator'})

    @app.route('/mapreduce', methods=['POST'])
    def mapreduce():
        text = _json_body().get('text')
        job = MapReduceJob(registry.snapshot(), timeout=app.config['CALL_TIMEOUT'])
        try:
            result = job.run(text)
        except MapReduceError:
            raise
        except Exception as e:
            logger.exception("MapReduce job failed")
            return jsonify({'error': str(e)}), 500
        return jsonify(result.to_dict())

    return app


def serve(host='0.0.0.0', port=config.DEFAULT_COORDINATOR_PORT):
    """Start the coordinator HTTP server"""
    app = create_app()
    logger.info(f"Coordinator listening on {host}:{port}")
    logger.info(f"Minimum requirements: {config.MIN_MAPPERS} mappers, "
                f"{config.MIN_REDUCERS} reducers")
    app.run(host=host, port=port, threaded=True)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT)

    parser = argparse.ArgumentParser(description='MapReduce Coordinator Server')
    parser.add_argument('--host', type=str, default='0.0.0.0',
                        help='Interface to bind (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=config.DEFAULT_COORDINATOR_PORT,
                        help=f'Coordinator port (default: {config.DEFAULT_COORDINATOR_PORT})')

    args = parser.parse_args(argv)
    serve(host=args.host, port=args.port)


if __name__ == '__main__':
    main()

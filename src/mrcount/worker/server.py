"""
Worker server for the MapReduce word count.
Serves /map (mappers) or /reduce (reducers) and registers with the coordinator.
"""

import argparse
import logging
import signal

import psutil
from flask import Flask, jsonify, request

from mrcount import config
from mrcount.worker.registration import CoordinatorRegistration
from mrcount.worker.wordcount import count_words, sum_counts

logger = logging.getLogger(__name__)


def _base_app(kind: str, address: str) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.config['WORKER_KIND'] = kind
    app.config['WORKER_ADDRESS'] = address

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'healthy',
            'type': kind,
            'address': address,
            'cpu_percent': psutil.cpu_percent(interval=None),
            'memory_percent': psutil.virtual_memory().percent,
        })

    return app


def _bad_request(message):
    return jsonify({'error': message}), 400


def create_mapper_app(address: str) -> Flask:
    """Mapper: counts the words of one chunk"""
    app = _base_app('mapper', address)

    @app.route('/map', methods=['POST'])
    def map_chunk():
        body = request.get_json(silent=True) or {}
        chunk = body.get('chunk') if isinstance(body, dict) else None
        if not isinstance(chunk, dict) or not isinstance(chunk.get('text'), str) or 'id' not in chunk:
            return _bad_request('Missing required field: chunk {id, text}')

        counts = count_words(chunk['text'])
        logger.info(f"Mapper {address} processed chunk {chunk['id']}: {len(counts)} distinct words")
        return jsonify({'mapperId': chunk['id'], 'counts': counts})

    return app


def create_reducer_app(address: str) -> Flask:
    """Reducer: totals the per-mapper counts of one word"""
    app = _base_app('reducer', address)

    @app.route('/reduce', methods=['POST'])
    def reduce_word():
        body = request.get_json(silent=True) or {}
        word = body.get('word') if isinstance(body, dict) else None
        values = body.get('values') if isinstance(body, dict) else None
        if not isinstance(word, str) or not isinstance(values, list):
            return _bad_request('Missing required fields: word and values')

        try:
            total, sources = sum_counts(values)
        except (KeyError, TypeError, ValueError):
            return _bad_request('Each value needs mapperId and an integer count')

        logger.info(f"Reducer {address} total for '{word}': {total}")
        return jsonify({'word': word, 'count': total, 'sources': sources})

    return app


APP_FACTORIES = {
    'mapper': create_mapper_app,
    'reducer': create_reducer_app,
}


def serve(kind, port, coordinator_url=config.COORDINATOR_URL, host='0.0.0.0',
          advertise_host='localhost'):
    """Run a worker until interrupted, registering on start and unregistering on exit"""
    address = f"http://{advertise_host}:{port}"
    app = APP_FACTORIES[kind](address)
    registration = CoordinatorRegistration(kind, address, coordinator_url)

    def handle_sigterm(signum, frame):
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, handle_sigterm)

    logger.info(f"{kind} listening on {host}:{port} (address {address}), "
                f"coordinator {coordinator_url}")
    registration.start()
    try:
        app.run(host=host, port=port, threaded=True)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info(f"{kind} {address} shutting down")
        registration.stop()
        registration.unregister()


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT)

    parser = argparse.ArgumentParser(description='MapReduce Worker Server')
    parser.add_argument('kind', choices=sorted(APP_FACTORIES),
                        help='Worker kind')
    parser.add_argument('--port', type=int,
                        help=f'Worker port (default: {config.DEFAULT_MAPPER_PORT} for mappers, '
                             f'{config.DEFAULT_REDUCER_PORT} for reducers)')
    parser.add_argument('--coordinator', type=str, default=config.COORDINATOR_URL,
                        help=f'Coordinator URL (default: {config.COORDINATOR_URL})')
    parser.add_argument('--host', type=str, default='0.0.0.0',
                        help='Interface to bind (default: 0.0.0.0)')
    parser.add_argument('--advertise-host', type=str, default='localhost',
                        help='Host name the coordinator should use to reach this worker')

    args = parser.parse_args(argv)
    port = args.port
    if port is None:
        port = config.DEFAULT_MAPPER_PORT if args.kind == 'mapper' else config.DEFAULT_REDUCER_PORT
    serve(args.kind, port, args.coordinator, host=args.host, advertise_host=args.advertise_host)


if __name__ == '__main__':
    main()

from flask import Flask, jsonify
from flask_cors import CORS
import logging

from backend import leaderboard
from backend.config import Config
from backend.errors import LeaderboardError
from backend.periods import period_bounds, utcnow
from backend.programs import PROGRAMS
from backend.upstream import PROVIDERS, JsonFetcher


def create_app(config=None, fetch_json=None, clock=utcnow):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    CORS(app)

    if fetch_json is None:
        fetch_json = JsonFetcher(timeout=app.config['UPSTREAM_TIMEOUT'], retries=app.config['UPSTREAM_RETRIES'])
    providers = {name: cls.from_config(app.config) for name, cls in PROVIDERS.items()}

    def unknown():
        return jsonify({'error': 'Unknown leaderboard program'}), 404

    def board(name, which, message):
        program = PROGRAMS.get(name)
        if program is None:
            return unknown()
        # fresh per request
        window = getattr(period_bounds(program.mode, clock()), which)
        provider = providers[program.provider]
        try:
            records = provider.fetch(window, fetch_json)
            payload = leaderboard.build(records, program.prizes, window, provider.filter_non_positive)
        except LeaderboardError:
            app.logger.exception('Error fetching %s leaderboard for %s', which, name)
            return jsonify({'error': message}), 500
        return jsonify(payload.to_dict())

    @app.route('/api/leaderboard/<program>', methods=['GET'])
    def get_leaderboard(program):
        return board(program, 'current', 'Failed to fetch leaderboard data')

    @app.route('/api/prev-leaderboard/<program>', methods=['GET'])
    def get_prev_leaderboard(program):
        return board(program, 'previous', 'Failed to fetch previous leaderboard data')

    @app.route('/api/countdown/<program>', methods=['GET'])
    def get_countdown(program):
        prog = PROGRAMS.get(program)
        if prog is None:
            return unknown()
        now = clock()
        window = period_bounds(prog.mode, now).current
        return jsonify({'percentageLeft': leaderboard.percentage_left(window, now)})

    @app.route('/api/programs', methods=['GET'])
    def get_programs():
        return jsonify([{'name': p.name, 'provider': p.provider, 'mode': p.mode.value} for p in PROGRAMS.values()])

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'ok': True})

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({'error': 'Internal server error'}), 500

    return app


def configure_logging(debug=False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logging.getLogger('urllib3').setLevel(logging.WARNING)


app = create_app()

if __name__ == '__main__':
    configure_logging(Config.DEBUG)
    app.logger.info('Server running at http://localhost:%s', Config.PORT)
    app.run(host='0.0.0.0', port=Config.PORT, debug=Config.DEBUG)

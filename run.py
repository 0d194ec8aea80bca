import argparse
import logging

from joinsound.config import Config
from joinsound.logger import setup_logging


def run_web(host=None, port=None):
    from joinsound.web.app import create_app
    from joinsound.web.auth import verifier_from_config

    for warning in Config.validate():
        logging.warning(warning)

    app = create_app(Config, verify_caller=verifier_from_config(Config))
    app.run(host=host or Config.WEB_HOST, port=port or Config.PORT)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run join sound components")
    parser.add_argument('component', choices=['web'], help="Component to run")
    parser.add_argument('--host', default=None)
    parser.add_argument('--port', type=int, default=None)

    args = parser.parse_args()

    setup_logging()

    if args.component == 'web':
        run_web(args.host, args.port)

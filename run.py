#!/usr/bin/env python3
"""
KestrelPay - Entry Point
Run the Flask application
"""

import logging
from pathlib import Path

from kestrelpay.config import ConfigManager
from kestrelpay.main import create_app

if __name__ == "__main__":
    config = ConfigManager(Path(__file__).parent).load()

    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format
    )

    app = create_app(config=config)

    host = config.server.host
    port = config.server.port
    debug = config.server.debug

    print(f"\n{'='*50}")
    print(f"  {config.service_name} v{config.version}")
    print(f"{'='*50}")
    print(f"  Server: http://{host}:{port}")
    print(f"  Swarm: {config.swarm.population_size} scorers, threshold {config.swarm.confidence_threshold}")
    print(f"  Snapshots: {config.snapshots.source.value}")
    print(f"  Debug Mode: {debug}")
    print(f"{'='*50}\n")

    app.run(host=host, port=port, debug=debug, threaded=True)

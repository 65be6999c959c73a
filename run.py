#!/usr/bin/env python3
"""
PI-SPI Participant Simulator Entry Point

Starts the FastAPI server with the simulated participant.
"""

import sys

from pispi_simulator.api import run_server
from pispi_simulator.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting PI-SPI participant simulator...")
    print(f"Scenario: {config.scenario}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down PI-SPI participant simulator...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)

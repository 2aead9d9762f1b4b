#!/usr/bin/env python
"""
HoloDraw - Main Entry Point
===========================
Run the gesture drawing surface.
"""

from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from holodraw.app import main

if __name__ == "__main__":
    main()

"""
Allow running sorcar as a module:

    python3 -m sorcar <file_stem> [options]

Delegates to sorcar.cli:main().
"""
import sys
from .cli import main

sys.exit(main())

# src/mlprocess/__main__.py
import sys

from mlprocess.cli import main

sys.exit(main())

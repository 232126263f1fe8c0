"""Allow running chainscore with ``python -m chainscore``"""

from . import main

main()

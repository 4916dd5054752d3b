"""Allow ``python -m registry_catalogs``."""
from registry_catalogs.catalogs import main

main()

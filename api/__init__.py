"""HTTP API for the nrv site."""

"""HTTP API – application factory, dependencies and routers."""

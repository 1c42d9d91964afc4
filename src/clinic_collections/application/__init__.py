"""Application layer – query engine, gateway port, controller, mutations and views."""

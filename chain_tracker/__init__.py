"""Multi-chain monitoring backend for Cosmos SDK networks."""

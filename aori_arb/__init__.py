"""
Aori Arbitrage Bot

Trading-bot plugin for the Aori limit-order exchange.

- Entry point: python -m aori_arb.main
- Connects the request and feed websockets and authenticates the wallet
- Decodes exchange frames into typed events
- Detects two-leg arbitrage between opposing orders
- Sends signed take-order requests

Key Modules:
- aori_arb.clients: Signing, request payloads, websocket provider
- aori_arb.models: Seaport orders and exchange events
- aori_arb.engine: Collector / strategy / executor contract
- aori_arb.arbitrage: Arbitrage strategy
"""

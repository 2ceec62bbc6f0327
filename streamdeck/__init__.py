"""
Stream Deck side of the plugin: websocket transport, inbound event models,
outbound event forwarding and the per-button polling driver.
"""

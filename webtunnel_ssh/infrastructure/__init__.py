"""
Infrastructure layer: relay connections and port forwarding
"""

"""Cross-cutting helpers shared by AgriLoop services.

Logging configuration, Prometheus metric definitions and OpenTelemetry
tracing setup live here so the API package only wires them together.
"""

"""Configuration, datamodels and errors shared by the exporter."""

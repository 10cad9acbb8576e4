"""Command line interface for kapeta-registry"""

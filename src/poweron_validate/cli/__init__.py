# Copyright (c) Syntropy Systems
"""validate-poweron CLI package."""

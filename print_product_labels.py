#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Preview and print product labels from a products JSON file.
"""

import sys

import pos_label_engine.cli


if __name__ == "__main__":
	sys.exit(pos_label_engine.cli.main())

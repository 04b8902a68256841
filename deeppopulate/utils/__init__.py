# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/utils/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Small helpers shared by the middleware and the CLI.
"""

# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/middleware/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Request middleware and request filtering for deep populate.
"""

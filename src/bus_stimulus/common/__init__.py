#
# Bus Stimulus Engine - Common Definitions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

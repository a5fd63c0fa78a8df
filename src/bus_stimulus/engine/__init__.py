#
# Bus Stimulus Engine - Interpreter Core
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

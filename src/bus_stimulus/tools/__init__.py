#
# Bus Stimulus Engine - Host Tools Package
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Host-side tools for checking and dry-running stimulus scripts.
#
# These tools have minimal dependencies (click, rich) and do not require a
# simulator.
#

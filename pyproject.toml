[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Networked tic-tac-toe over TCP and UDP, and chunked message delivery with acknowledgements and retransmission over UDP."
requires-python = ">=3.10"
dependencies = []
keywords = ["tic-tac-toe", "tcp", "udp", "sockets", "retransmission", "sequencing", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-tcp-server = "netlab.tcp_server:main"
netlab-udp-server = "netlab.udp_server:main"
netlab-client = "netlab.client:main"
netlab-chunk-client = "netlab.chunk_client:main"
netlab-chunk-server = "netlab.chunk_server:main"
netlab-sequencing-sender = "netlab.sequencing:sender_main"
netlab-sequencing-receiver = "netlab.sequencing:receiver_main"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

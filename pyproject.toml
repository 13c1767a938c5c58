[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syscourse"
version = "0.1.0"
description = "Small runnable demonstrations of threads, shared memory, message queues and sockets for a systems programming course"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "threads",
    "mutex",
    "condition-variable",
    "semaphore",
    "ipc",
    "shared-memory",
    "message-queue",
    "sockets",
    "dining-philosophers",
    "teaching",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syscourse-picalc = "syscourse.picalc:main"
syscourse-picalc-threaded = "syscourse.picalc:main_threaded"
syscourse-odds-evens = "syscourse.oddsevens:main"
syscourse-threads = "syscourse.threaddemos:main"
syscourse-philosophers = "syscourse.philosophers:main"
syscourse-tcp-server = "syscourse.tcpdemo:main_server"
syscourse-tcp-pause = "syscourse.tcpdemo:main_pause"
syscourse-tcp-client = "syscourse.tcpdemo:main_client"
syscourse-unix-server = "syscourse.unixsock:main_server"
syscourse-unix-client = "syscourse.unixsock:main_client"
syscourse-shm = "syscourse.sharedmem:main"
syscourse-email = "syscourse.sharedmem:email_main"
syscourse-messages = "syscourse.messaging:main"

[tool.hatch.build.targets.wheel]
packages = ["syscourse"]

[tool.pytest.ini_options]
addopts = "-ra"

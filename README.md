# syscourse

A set of small, runnable programs that show classic ideas of systems
programming: racing and coordinated threads, mutexes and condition
variables, semaphores, the dining philosophers, shared memory segments,
message queues, and TCP and Unix-domain sockets.

Every program is short enough to read in one sitting. The interesting part
is usually what happens when you change the coordination strategy and watch
the output change.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Programs

### Estimating pi

Throws random points into the unit square and counts how many land inside
the quarter circle. The generators reproduce the C library's `rand_r()` and
`srand()`/`rand()` sequences, so a given seed always gives the same count.

```
syscourse-picalc 1000000
syscourse-picalc --rand 1000000
syscourse-picalc-threaded 1000000 4
syscourse-picalc-threaded --counting=locked 1000000 4
```

The threaded version splits the points between worker threads (four by
default) and adds up the hits. `--counting` chooses how: `unsynchronized`
(no coordination, updates may be lost), `locked` (a lock around every hit) or
`local` (one locked update per thread, the default).

### Odd and even threads

Threads take turns incrementing a shared counter: "even" threads may only
increment an even value, "odd" threads an odd one.

```
syscourse-odds-evens --strategy busy
syscourse-odds-evens --strategy two_condvars --threads 3 --iters 10 --quiet
```

Strategies are `busy`, `nested_if`, `triple_if`, `condvar` (the default) and
`two_condvars`. `--quiet` leaves out the messages printed while a thread
waits for its turn.

### Thread basics

```
syscourse-threads condvar
syscourse-threads mutex --delay 0.5
syscourse-threads ids
syscourse-threads minimal
```

- `condvar`: two threads count up while a third waits on a condition variable
  for a threshold and then adds a bonus.
- `mutex`: two threads each double a shared value while holding a lock and
  sleeping; the waiting thread blocks rather than spins.
- `ids`: prints thread identities while a thread doubles a value owned by the
  caller.
- `minimal`: passes a value to a thread and prints the doubled result.

### Dining philosophers

Five diners share five utensils guarded by semaphores. The last diner picks
up the utensils in the opposite order, which prevents deadlock.

```
syscourse-philosophers
syscourse-philosophers --philosophers 7 --meals 3 --max-delay 1000 --gate
```

With `--gate` every diner waits at the table until all have arrived.

### Sockets

A TCP server that greets each client with `Hello, world!`, a server that
waits for a number of clients (four by default) and then tells them it is
shutting down, and a client that connects and prints what it receives. All
use port 12344 unless `--port` is given.

```
syscourse-tcp-server
syscourse-tcp-pause --clients 2
syscourse-tcp-client localhost
```

A Unix-domain socket server that prints whatever its client sends, and a
client that forwards its standard input. The server handles one client and
exits, or keeps serving clients one after another with `--loop`.

```
syscourse-unix-server /tmp/demo.sock --loop
syscourse-unix-client /tmp/demo.sock
```

### Shared memory

A named 1 KB segment, kept as a file in `/dev/shm` (or the temporary
directory where there is none), that outlives the program. With no argument
the current contents are printed; with an argument it is written into the
segment; `-watch` prints the contents every second and `-delete` removes the
segment. `--name=NAME` picks another segment.

```
syscourse-shm
syscourse-shm "some text"
syscourse-shm -watch
syscourse-shm -delete
```

A name-to-address directory kept in a shared segment:

```
syscourse-email restore
syscourse-email lookup "Casey Thorn"
syscourse-email change "Casey Thorn" casey@example.com
```

### Message queues

Reads lines from standard input, sends each one over a bounded message queue
and prints the answer that comes back on a second queue
(`Captain: '...' is highly illogical`). Both parties run in the same process.

```
syscourse-messages
```

## Using the library

Each program is also a module whose pieces can be called directly:

```python
from syscourse.picalc import estimate_pi, format_report
from syscourse.philosophers import utensil_order
from syscourse.messaging import MessageQueue, spock_reply

estimate = estimate_pi(100000, seed=123456789, use_rand=False)
print(format_report(estimate))

print(utensil_order(4, 5))   # (0, 4): the last diner reaches for utensil 0 first

print(spock_reply("hello"))
```

## What it does not do

There is no program for appending to a shared file from many processes at
once, so comparing ways of appending (plain seeks, file locks, append mode,
separate locks) is not covered. The philosophers and message queue programs
use threads within one process rather than separate processes.
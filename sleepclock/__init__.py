"""Ok-to-wake clock: bedtime/wake schedule evaluator with nap support"""

__version__ = "0.1.0"

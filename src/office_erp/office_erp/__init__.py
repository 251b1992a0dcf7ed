"""Office ERP core package.

Attendance gate, attendance correction requests, reward fund ledger and
task performance scoring, organized by feature modules (networks, attendance,
requests, rewards, tasks, performance, users) with a thin Flask controller
layer over service/repository layers.
"""

"""Case domain services: workflow, ledger, fabrication and listings.

HTTP routes and socket handlers import from here; the modules in this
package know nothing about requests or responses.
"""

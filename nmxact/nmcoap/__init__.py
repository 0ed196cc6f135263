"""CoAP messages, listener criteria, reassembly and dispatch."""
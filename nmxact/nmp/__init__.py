"""Newtmgr protocol headers, command messages, decoding and dispatch."""